import logging

from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema, OpenApiParameter, inline_serializer
from drf_spectacular.types import OpenApiTypes
from rest_framework import viewsets, status, serializers as drf_serializers
from rest_framework.decorators import action, api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response

from .authentication import CafeTokenAuthentication, get_cafe_token_service
from .emails import send_merchant_signup_email, send_admin_signup_notification, send_password_reset_email
from .exceptions import PasswordChangeRequired, MerchantNotFound
from .models import Category, Merchant, MerchantLocation, GiftItem, LocationQRCode
from .permissions import IsMerchant, IsApprovedMerchant
from .throttling import CafeSignupThrottle, PasswordResetThrottle
from .serializers import (
    # Input serializers
    CafeLoginInputSerializer,
    ChangePasswordInputSerializer,
    CafeSignupInputSerializer,
    ForgotPasswordInputSerializer,
    ResetTokenInputSerializer,
    ResetPasswordInputSerializer,
    GiftItemFilterSerializer,
    BrontieFeeInputSerializer,
    DenyMerchantInputSerializer,
    QRGenerateInputSerializer,
    # Output serializers
    CategorySerializer,
    MerchantSerializer,
    MerchantProfileSerializer,
    MerchantLocationSerializer,
    GiftItemSerializer,
    GiftItemWriteSerializer,
    AdminGiftItemSerializer,
    LocationQRCodeSerializer,
    QRValidationSerializer,
)
from .services import (
    authenticate_merchant,
    change_merchant_password,
    register_merchant,
    request_password_reset,
    verify_reset_token,
    confirm_password_reset,
    create_gift_item,
    update_gift_item,
    deactivate_gift_item,
    approve_merchant,
    deny_merchant,
    set_brontie_fee,
    generate_location_qr,
    validate_qr_code,
    render_qr_png,
    qr_code_url,
)

logger = logging.getLogger(__name__)


# Response serializers for API documentation
class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()
    code = drf_serializers.CharField()


class MessageResponseSerializer(drf_serializers.Serializer):
    success = drf_serializers.BooleanField()
    message = drf_serializers.CharField()


# =============================================================================
# Café portal
# =============================================================================

@extend_schema(
    request=CafeLoginInputSerializer,
    responses={
        200: inline_serializer('CafeLoginResponse', {
            'success': drf_serializers.BooleanField(),
            'requiresPasswordChange': drf_serializers.BooleanField(required=False),
            'merchant': MerchantProfileSerializer(required=False),
        }),
        401: ErrorResponseSerializer,
    },
    description="Sign in to the café portal. Sets the HTTP-only cafe-token cookie.",
    tags=['cafes'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def cafe_login(request):
    """Café login - thin HTTP handler."""
    serializer = CafeLoginInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        merchant = authenticate_merchant(**serializer.validated_data)
    except PasswordChangeRequired as e:
        return Response({
            'success': False,
            'requiresPasswordChange': True,
            'message': str(e.detail),
        })

    token_service = get_cafe_token_service()
    response = Response({
        'success': True,
        'merchant': {
            'id': str(merchant.id),
            'name': merchant.name,
            'email': merchant.contact_email,
            'status': merchant.status,
        },
    })
    token_service.set_cookie(response, token_service.issue(merchant))
    logger.info('Merchant %s signed in to the café portal', merchant.id)
    return response


@extend_schema(
    request=None,
    responses={200: MessageResponseSerializer},
    description="Sign out of the café portal.",
    tags=['cafes'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def cafe_logout(request):
    """Delete the café session cookie."""
    response = Response({'success': True, 'message': 'Logged out'})
    return get_cafe_token_service().delete_cookie(response)


@extend_schema(
    request=ChangePasswordInputSerializer,
    responses={
        200: MessageResponseSerializer,
        401: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
    },
    description="Change the café password; the temporary password is accepted as current.",
    tags=['cafes'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def cafe_change_password(request):
    """Change café password."""
    serializer = ChangePasswordInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    change_merchant_password(
        email=data['email'],
        current_password=data['currentPassword'],
        new_password=data['newPassword'],
    )
    return Response({'success': True, 'message': 'Password changed successfully'})


@extend_schema(
    methods=['GET'],
    responses={200: MerchantProfileSerializer, 401: ErrorResponseSerializer},
    description="Get the signed-in merchant's profile.",
    tags=['cafes'],
)
@extend_schema(
    methods=['PATCH'],
    request=MerchantProfileSerializer,
    responses={200: MerchantProfileSerializer, 400: ErrorResponseSerializer},
    description="Update the signed-in merchant's profile and payout details.",
    tags=['cafes'],
)
@api_view(['GET', 'PATCH'])
@authentication_classes([CafeTokenAuthentication])
@permission_classes([IsMerchant])
def cafe_profile(request):
    """Get or update café profile."""
    merchant = request.user
    if request.method == 'PATCH':
        serializer = MerchantProfileSerializer(merchant, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
    return Response(MerchantProfileSerializer(merchant).data)


@extend_schema(
    request=CafeSignupInputSerializer,
    responses={
        201: inline_serializer('CafeSignupResponse', {
            'success': drf_serializers.BooleanField(),
            'message': drf_serializers.CharField(),
            'merchantId': drf_serializers.UUIDField(),
        }),
        400: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
        429: ErrorResponseSerializer,
    },
    description="Apply to sell on Brontie. The merchant waits in 'pending' until staff approve it.",
    tags=['cafes'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([CafeSignupThrottle])
def cafe_signup(request):
    """Café signup - thin HTTP handler."""
    serializer = CafeSignupInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    details = data['merchant']

    merchant = register_merchant(
        name=details['name'],
        address=details['address'],
        county=details['county'],
        business_email=details['businessEmail'],
        business_category=details['businessCategory'],
        description=details.get('description', ''),
        contact_phone=details.get('contactPhone', ''),
        website=details.get('website', ''),
        logo_url=details.get('logoUrl', ''),
        gift_items=[
            {
                'name': item['name'],
                'category': item['categoryId'],
                'price': item['price'],
                'description': item.get('description', ''),
                'image_url': item.get('imageUrl', ''),
            }
            for item in data['giftItems']
        ],
    )

    send_merchant_signup_email(merchant)
    send_admin_signup_notification(merchant)

    return Response({
        'success': True,
        'message': 'Application submitted successfully',
        'merchantId': str(merchant.id),
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    request=ForgotPasswordInputSerializer,
    responses={200: inline_serializer('ForgotPasswordResponse', {'message': drf_serializers.CharField()})},
    description=(
        "Email a password reset link. The answer is the same whether or not "
        "the email belongs to a merchant."
    ),
    tags=['cafes'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([PasswordResetThrottle])
def cafe_forgot_password(request):
    serializer = ForgotPasswordInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        merchant, token = request_password_reset(email=serializer.validated_data['email'])
    except MerchantNotFound:
        logger.info('Password reset requested for unknown or unapproved email')
    else:
        send_password_reset_email(merchant, token)

    return Response({
        'message': 'If an account with that email exists, we have sent a password reset link.',
    })


@extend_schema(
    parameters=[OpenApiParameter('token', OpenApiTypes.STR, required=True)],
    responses={
        200: inline_serializer('VerifyResetTokenResponse', {
            'valid': drf_serializers.BooleanField(),
            'merchantName': drf_serializers.CharField(),
        }),
        400: ErrorResponseSerializer,
    },
    description="Check a password reset token before showing the reset form.",
    tags=['cafes'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def cafe_verify_reset_token(request):
    serializer = ResetTokenInputSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    merchant = verify_reset_token(token=serializer.validated_data['token'])
    return Response({'valid': True, 'merchantName': merchant.name})


@extend_schema(
    request=ResetPasswordInputSerializer,
    responses={200: MessageResponseSerializer, 400: ErrorResponseSerializer},
    description="Set a new password with a reset token. The token works once.",
    tags=['cafes'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([PasswordResetThrottle])
def cafe_reset_password(request):
    serializer = ResetPasswordInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    confirm_password_reset(token=data['token'], new_password=data['password'])
    return Response({'success': True, 'message': 'Password reset successfully'})


class CafeGiftItemViewSet(viewsets.ModelViewSet):
    """
    Gift items of the signed-in merchant.

    list: Items of this merchant, active or not
    create: Add an item (locations must belong to this merchant)
    retrieve/update: Read or edit one item
    destroy: Deactivate the item (sold vouchers stay valid)
    """

    authentication_classes = [CafeTokenAuthentication]
    permission_classes = [IsApprovedMerchant]

    def get_queryset(self):
        return (
            GiftItem.objects
            .filter(merchant=self.request.user)
            .select_related('merchant', 'category')
            .prefetch_related('locations')
        )

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return GiftItemWriteSerializer
        return GiftItemSerializer

    def perform_create(self, serializer):
        data = dict(serializer.validated_data)
        locations = data.pop('locations', None)
        serializer.instance = create_gift_item(
            merchant=self.request.user,
            locations=locations,
            **data,
        )

    def perform_update(self, serializer):
        data = dict(serializer.validated_data)
        locations = data.pop('locations', None)
        serializer.instance = update_gift_item(
            gift_item=serializer.instance,
            locations=locations,
            **data,
        )

    def perform_destroy(self, instance):
        deactivate_gift_item(gift_item=instance)


# =============================================================================
# Public storefront
# =============================================================================

@extend_schema(
    responses={200: CategorySerializer(many=True)},
    description="List active categories in display order.",
    tags=['storefront'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def category_list(request):
    categories = Category.objects.filter(is_active=True)
    return Response(CategorySerializer(categories, many=True).data)


@extend_schema(
    parameters=[
        OpenApiParameter('category', OpenApiTypes.STR, description='Category slug'),
        OpenApiParameter('merchant', OpenApiTypes.UUID, description='Merchant ID'),
    ],
    responses={200: GiftItemSerializer(many=True)},
    description="List gift items on sale from approved merchants.",
    tags=['storefront'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def gift_item_list(request):
    filter_serializer = GiftItemFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)
    params = filter_serializer.validated_data

    queryset = (
        GiftItem.objects
        .filter(is_active=True, merchant__status='approved', merchant__is_active=True)
        .select_related('merchant', 'category')
        .prefetch_related('locations')
    )
    if 'category' in params:
        queryset = queryset.filter(category__slug=params['category'])
    if 'merchant' in params:
        queryset = queryset.filter(merchant_id=params['merchant'])

    return Response(GiftItemSerializer(queryset, many=True).data)


@extend_schema(
    responses={200: GiftItemSerializer, 404: ErrorResponseSerializer},
    description="Get one active gift item.",
    tags=['storefront'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def gift_item_detail(request, pk):
    gift_item = get_object_or_404(
        GiftItem.objects.select_related('merchant', 'category').prefetch_related('locations'),
        pk=pk,
        is_active=True,
    )
    return Response(GiftItemSerializer(gift_item).data)


@extend_schema(
    responses={200: QRValidationSerializer, 404: ErrorResponseSerializer},
    description="Resolve a scanned in-store QR code to its merchant location.",
    tags=['storefront'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def qr_validate(request, short_id):
    qr = validate_qr_code(short_id)
    return Response(QRValidationSerializer(qr).data)


# =============================================================================
# Staff back-office
# =============================================================================

class AdminMerchantViewSet(viewsets.ModelViewSet):
    """
    Merchant administration.

    approve: Approve an application and email a temporary password
    deny: Deny an application
    brontie_fee: Switch the Brontie commission on or off
    """

    queryset = Merchant.objects.prefetch_related('locations')
    serializer_class = MerchantSerializer
    permission_classes = [IsAdminUser]

    def get_queryset(self):
        queryset = super().get_queryset()
        merchant_status = self.request.query_params.get('status')
        if merchant_status:
            queryset = queryset.filter(status=merchant_status)
        return queryset

    @extend_schema(
        request=None,
        responses={200: MerchantSerializer, 400: ErrorResponseSerializer},
        tags=['admin'],
    )
    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        merchant, email_sent = approve_merchant(merchant_id=pk)
        data = MerchantSerializer(merchant).data
        data['emailSent'] = email_sent
        return Response(data)

    @extend_schema(
        request=DenyMerchantInputSerializer,
        responses={200: MerchantSerializer, 400: ErrorResponseSerializer},
        tags=['admin'],
    )
    @action(detail=True, methods=['post'])
    def deny(self, request, pk=None):
        serializer = DenyMerchantInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        merchant, email_sent = deny_merchant(
            merchant_id=pk,
            reason=serializer.validated_data.get('reason', ''),
        )
        data = MerchantSerializer(merchant).data
        data['emailSent'] = email_sent
        return Response(data)

    @extend_schema(
        request=BrontieFeeInputSerializer,
        responses={200: MerchantSerializer},
        tags=['admin'],
    )
    @action(detail=True, methods=['post'], url_path='brontie-fee')
    def brontie_fee(self, request, pk=None):
        serializer = BrontieFeeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        merchant = set_brontie_fee(
            merchant_id=pk,
            is_active=data['isActive'],
            commission_rate=data.get('commissionRate'),
            reason=data.get('reason', ''),
        )
        return Response(MerchantSerializer(merchant).data)


class AdminCategoryViewSet(viewsets.ModelViewSet):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [IsAdminUser]


class AdminLocationViewSet(viewsets.ModelViewSet):
    queryset = MerchantLocation.objects.select_related('merchant')
    serializer_class = MerchantLocationSerializer
    permission_classes = [IsAdminUser]

    def get_queryset(self):
        queryset = super().get_queryset()
        merchant_id = self.request.query_params.get('merchant')
        if merchant_id:
            queryset = queryset.filter(merchant_id=merchant_id)
        return queryset


class AdminGiftItemViewSet(viewsets.ModelViewSet):
    queryset = GiftItem.objects.select_related('merchant', 'category').prefetch_related('locations')
    permission_classes = [IsAdminUser]

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return AdminGiftItemSerializer
        return GiftItemSerializer


@extend_schema(
    request=QRGenerateInputSerializer,
    responses={
        200: LocationQRCodeSerializer,
        201: LocationQRCodeSerializer,
        404: ErrorResponseSerializer,
    },
    description="Return the active QR code of a location, creating or regenerating it.",
    tags=['admin'],
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def admin_qr_generate(request):
    serializer = QRGenerateInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    location = get_object_or_404(MerchantLocation, pk=serializer.validated_data['locationId'])

    qr, created = generate_location_qr(
        location=location,
        regenerate=serializer.validated_data['regenerate'],
    )
    return Response(
        LocationQRCodeSerializer(qr).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )


@extend_schema(
    responses={(200, 'image/png'): OpenApiTypes.BINARY},
    description="Render a location QR code as PNG for printing.",
    tags=['admin'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def admin_qr_image(request, short_id):
    qr = get_object_or_404(LocationQRCode, short_id=short_id)
    png = render_qr_png(qr_code_url(qr))
    response = HttpResponse(png, content_type='image/png')
    response['Content-Disposition'] = f'inline; filename="qr-{qr.short_id}.png"'
    return response
