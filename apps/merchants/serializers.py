from decimal import Decimal

from rest_framework import serializers
from .models import Category, Merchant, MerchantLocation, GiftItem, LocationQRCode, validate_price_step
from .services import qr_code_url

MAX_SIGNUP_GIFT_ITEMS = 15


# =============================================================================
# Input Serializers
# =============================================================================

class CafeLoginInputSerializer(serializers.Serializer):
    """Validate café portal login."""

    email = serializers.EmailField()
    password = serializers.CharField(style={'input_type': 'password'})


class ChangePasswordInputSerializer(serializers.Serializer):
    """
    Validate café password change.

    Fields:
        email (str): Merchant contact email
        currentPassword (str): Current or temporary password
        newPassword (str): New password, at least 8 characters
    """

    email = serializers.EmailField()
    currentPassword = serializers.CharField(style={'input_type': 'password'})
    newPassword = serializers.CharField(min_length=8, style={'input_type': 'password'})


class SignupMerchantSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    address = serializers.CharField(max_length=300)
    county = serializers.CharField(max_length=50)
    businessEmail = serializers.EmailField()
    businessCategory = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    contactPhone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    website = serializers.URLField(required=False, allow_blank=True)
    logoUrl = serializers.URLField(required=False, allow_blank=True)


class SignupGiftItemSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    categoryId = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.filter(is_active=True)
    )
    price = serializers.DecimalField(
        max_digits=8,
        decimal_places=2,
        min_value=Decimal('0.50'),
        validators=[validate_price_step]
    )
    description = serializers.CharField(max_length=200, required=False, allow_blank=True)
    imageUrl = serializers.URLField(required=False, allow_blank=True)


class CafeSignupInputSerializer(serializers.Serializer):
    """
    Validate a café application.

    Fields:
        merchant (dict): Business details; businessEmail becomes the login
        giftItems (list): 1 to 15 items, priced from 0.50 in 0.10 steps
    """

    merchant = SignupMerchantSerializer()
    giftItems = SignupGiftItemSerializer(many=True)

    def validate_giftItems(self, value):
        if not 1 <= len(value) <= MAX_SIGNUP_GIFT_ITEMS:
            raise serializers.ValidationError(
                f'Must have 1-{MAX_SIGNUP_GIFT_ITEMS} gift items.'
            )
        return value


class ForgotPasswordInputSerializer(serializers.Serializer):
    email = serializers.EmailField()


class ResetTokenInputSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=100)


class ResetPasswordInputSerializer(serializers.Serializer):
    token = serializers.CharField(max_length=100)
    password = serializers.CharField(min_length=8, style={'input_type': 'password'})


class GiftItemFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the public gift item list.

    Query Parameters:
        category (str): Category slug
        merchant (UUID): Merchant ID
    """

    category = serializers.SlugField(required=False)
    merchant = serializers.UUIDField(required=False)


class BrontieFeeInputSerializer(serializers.Serializer):
    """Validate a Brontie fee toggle."""

    isActive = serializers.BooleanField()
    commissionRate = serializers.DecimalField(
        max_digits=4,
        decimal_places=3,
        min_value=0,
        max_value=1,
        required=False
    )
    reason = serializers.CharField(max_length=300, required=False, allow_blank=True)


class DenyMerchantInputSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000, required=False, allow_blank=True)


class QRGenerateInputSerializer(serializers.Serializer):
    """Validate QR code generation for a location."""

    locationId = serializers.UUIDField()
    regenerate = serializers.BooleanField(default=False)


# =============================================================================
# Output Serializers
# =============================================================================

class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = [
            'id',
            'name',
            'slug',
            'description',
            'is_active',
            'display_order',
        ]
        read_only_fields = ['id']
        extra_kwargs = {'slug': {'required': False}}


class MerchantLocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = MerchantLocation
        fields = [
            'id',
            'merchant',
            'name',
            'address',
            'city',
            'county',
            'zip_code',
            'country',
            'phone',
            'latitude',
            'longitude',
            'is_active',
        ]
        read_only_fields = ['id']


class MerchantPublicSerializer(serializers.ModelSerializer):
    """Merchant data shown on the storefront."""

    class Meta:
        model = Merchant
        fields = [
            'id',
            'name',
            'description',
            'address',
            'county',
            'business_category',
            'logo_url',
            'website',
        ]


class MerchantSerializer(serializers.ModelSerializer):
    """Full merchant record for staff. Credentials are never exposed."""

    locations = MerchantLocationSerializer(many=True, read_only=True)

    class Meta:
        model = Merchant
        exclude = ['password', 'temp_password', 'reset_token_hash', 'reset_token_expires_at']
        read_only_fields = [
            'id',
            'status',
            'is_active',
            'stripe_is_connected',
            'stripe_onboarding_completed',
            'stripe_charges_enabled',
            'stripe_payouts_enabled',
            'stripe_details_submitted',
            'brontie_fee_active',
            'brontie_fee_activated_at',
            'brontie_fee_deactivated_at',
            'brontie_fee_deactivation_reason',
            'created_at',
            'updated_at',
        ]


class MerchantProfileSerializer(serializers.ModelSerializer):
    """Fields a merchant can see and edit in the café portal."""

    locations = MerchantLocationSerializer(many=True, read_only=True)

    class Meta:
        model = Merchant
        fields = [
            'id',
            'name',
            'description',
            'address',
            'county',
            'business_category',
            'logo_url',
            'website',
            'contact_email',
            'contact_phone',
            'account_holder_name',
            'iban',
            'bic',
            'status',
            'brontie_fee_active',
            'commission_rate',
            'stripe_is_connected',
            'locations',
            'created_at',
        ]
        read_only_fields = [
            'id',
            'contact_email',
            'status',
            'brontie_fee_active',
            'commission_rate',
            'stripe_is_connected',
            'created_at',
        ]


class GiftItemSerializer(serializers.ModelSerializer):
    """Gift item with merchant, category and locations nested."""

    merchant = MerchantPublicSerializer(read_only=True)
    category = CategorySerializer(read_only=True)
    locations = MerchantLocationSerializer(many=True, read_only=True)

    class Meta:
        model = GiftItem
        fields = [
            'id',
            'name',
            'description',
            'price',
            'image_url',
            'is_active',
            'merchant',
            'category',
            'locations',
            'created_at',
        ]


class GiftItemWriteSerializer(serializers.ModelSerializer):
    """Create/update a gift item from the café portal; merchant comes from the session."""

    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.filter(is_active=True))
    locations = serializers.PrimaryKeyRelatedField(
        queryset=MerchantLocation.objects.all(),
        many=True,
        required=False
    )

    class Meta:
        model = GiftItem
        fields = [
            'id',
            'name',
            'description',
            'price',
            'image_url',
            'category',
            'locations',
            'is_active',
        ]
        read_only_fields = ['id']


class AdminGiftItemSerializer(GiftItemWriteSerializer):
    """Staff variant that also chooses the merchant."""

    merchant = serializers.PrimaryKeyRelatedField(queryset=Merchant.objects.all())
    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all())

    class Meta(GiftItemWriteSerializer.Meta):
        fields = GiftItemWriteSerializer.Meta.fields + ['merchant']


class LocationQRCodeSerializer(serializers.ModelSerializer):
    url = serializers.SerializerMethodField()

    class Meta:
        model = LocationQRCode
        fields = [
            'id',
            'short_id',
            'merchant',
            'location',
            'expires_at',
            'is_active',
            'url',
            'created_at',
        ]

    def get_url(self, obj):
        return qr_code_url(obj)


class QRValidationSerializer(serializers.Serializer):
    """Response for a scanned QR code."""

    shortId = serializers.CharField(source='short_id')
    merchant = MerchantPublicSerializer()
    location = MerchantLocationSerializer()
