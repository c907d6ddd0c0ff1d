from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.contrib.auth.hashers import make_password, check_password
from django.utils import timezone
from django.utils.text import slugify
from datetime import timedelta
from decimal import Decimal
import secrets
import string
import uuid


QR_SHORT_ID_ALPHABET = string.ascii_letters + string.digits
QR_SHORT_ID_LENGTH = 8
QR_CODE_LIFETIME = timedelta(days=5 * 365)


def validate_price_step(value):
    """Gift item prices move in 10 cent steps."""
    if (Decimal(value) * 10) % 1 != 0:
        raise ValidationError('Price must be a multiple of 0.10.')


class MerchantStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    DENIED = 'denied', 'Denied'


class Category(models.Model):
    """Storefront category (Coffee, Bakery, ...)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=120, unique=True)
    description = models.CharField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    display_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        indexes = [
            models.Index(fields=['is_active', 'display_order']),
        ]
        ordering = ['display_order', 'name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)


class Merchant(models.Model):
    """
    A café or shop selling gift items.

    Merchants sign in to the café portal with their own credentials, not
    with a staff ``User``; ``is_authenticated`` lets DRF treat an instance
    as ``request.user`` once the café token has been verified.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    address = models.CharField(max_length=300, blank=True)
    county = models.CharField(max_length=50, blank=True)
    business_category = models.CharField(max_length=100, blank=True)
    logo_url = models.URLField(blank=True)
    website = models.URLField(blank=True)

    # Contact
    contact_email = models.EmailField(unique=True, db_index=True)
    contact_phone = models.CharField(max_length=30, blank=True)

    # Approval
    status = models.CharField(
        max_length=20,
        choices=MerchantStatus.choices,
        default=MerchantStatus.PENDING
    )
    is_active = models.BooleanField(default=False)

    # Portal credentials
    password = models.CharField(max_length=128, blank=True)
    temp_password = models.CharField(max_length=128, blank=True)
    reset_token_hash = models.CharField(max_length=64, blank=True, db_index=True)
    reset_token_expires_at = models.DateTimeField(null=True, blank=True)

    # Payout details
    account_holder_name = models.CharField(max_length=200, blank=True)
    iban = models.CharField(max_length=34, blank=True)
    bic = models.CharField(max_length=11, blank=True)

    # Stripe Connect
    stripe_account_id = models.CharField(max_length=100, blank=True, db_index=True)
    stripe_is_connected = models.BooleanField(default=False)
    stripe_onboarding_completed = models.BooleanField(default=False)
    stripe_charges_enabled = models.BooleanField(default=False)
    stripe_payouts_enabled = models.BooleanField(default=False)
    stripe_details_submitted = models.BooleanField(default=False)

    # Brontie fee
    brontie_fee_active = models.BooleanField(default=False)
    commission_rate = models.DecimalField(
        max_digits=4,
        decimal_places=3,
        default=Decimal('0.100'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('1'))]
    )
    brontie_fee_activated_at = models.DateTimeField(null=True, blank=True)
    brontie_fee_deactivated_at = models.DateTimeField(null=True, blank=True)
    brontie_fee_deactivation_reason = models.CharField(max_length=300, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'merchants'
        indexes = [
            models.Index(fields=['status', 'is_active']),
            models.Index(fields=['county']),
        ]
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def is_authenticated(self):
        return True

    @property
    def is_anonymous(self):
        return False

    @property
    def is_approved(self):
        return self.status == MerchantStatus.APPROVED

    @property
    def brontie_fee_is_active(self):
        """Commission is only charged when switched on with a positive rate."""
        return bool(self.brontie_fee_active and self.commission_rate and self.commission_rate > 0)

    @property
    def effective_commission_rate(self):
        return self.commission_rate if self.brontie_fee_is_active else Decimal('0')

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        if not self.password:
            return False
        return check_password(raw_password, self.password)

    def has_usable_password(self):
        return bool(self.password)

    def set_temp_password(self, raw_password):
        self.temp_password = make_password(raw_password)

    def check_temp_password(self, raw_password):
        if not self.temp_password:
            return False
        return check_password(raw_password, self.temp_password)


class MerchantLocation(models.Model):
    """A physical site where vouchers can be redeemed."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    merchant = models.ForeignKey(
        Merchant,
        on_delete=models.CASCADE,
        related_name='locations'
    )
    name = models.CharField(max_length=200)
    address = models.CharField(max_length=300)
    city = models.CharField(max_length=100, blank=True)
    county = models.CharField(max_length=50, blank=True)
    zip_code = models.CharField(max_length=20, blank=True)
    country = models.CharField(max_length=100, default='Ireland')
    phone = models.CharField(max_length=30, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'merchant_locations'
        indexes = [
            models.Index(fields=['merchant', 'is_active']),
        ]
        ordering = ['name']

    def __str__(self):
        return f"{self.merchant.name} - {self.name}"


class GiftItem(models.Model):
    """A purchasable product, redeemable at a set of merchant locations."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    merchant = models.ForeignKey(
        Merchant,
        on_delete=models.CASCADE,
        related_name='gift_items'
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name='gift_items'
    )
    name = models.CharField(max_length=200)
    description = models.CharField(max_length=200, blank=True)
    price = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.50')), validate_price_step]
    )
    image_url = models.URLField(blank=True)
    locations = models.ManyToManyField(
        MerchantLocation,
        related_name='gift_items',
        blank=True
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'giftitems'
        indexes = [
            models.Index(fields=['merchant', 'is_active']),
            models.Index(fields=['category', 'is_active']),
        ]
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.price} EUR)"


class LocationQRCode(models.Model):
    """Short identifier printed as a QR code at a merchant location."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    short_id = models.CharField(max_length=QR_SHORT_ID_LENGTH, unique=True, db_index=True)
    merchant = models.ForeignKey(
        Merchant,
        on_delete=models.CASCADE,
        related_name='qr_codes'
    )
    location = models.ForeignKey(
        MerchantLocation,
        on_delete=models.CASCADE,
        related_name='qr_codes'
    )
    expires_at = models.DateTimeField()
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'location_qr_codes'
        indexes = [
            models.Index(fields=['location', 'is_active']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.short_id} -> {self.location}"

    def save(self, *args, **kwargs):
        if not self.short_id:
            self.short_id = self._generate_short_id()
        if not self.expires_at:
            self.expires_at = timezone.now() + QR_CODE_LIFETIME
        super().save(*args, **kwargs)

    @staticmethod
    def _generate_short_id():
        while True:
            short_id = ''.join(
                secrets.choice(QR_SHORT_ID_ALPHABET) for _ in range(QR_SHORT_ID_LENGTH)
            )
            if not LocationQRCode.objects.filter(short_id=short_id).exists():
                return short_id

    def is_valid(self):
        return self.is_active and self.expires_at > timezone.now()
