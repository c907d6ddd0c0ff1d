import logging

from drf_spectacular.utils import extend_schema, inline_serializer, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from rest_framework import serializers, viewsets
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response

from .exceptions import VoucherNotFound
from .models import Voucher, Transaction, PayoutItem
from .serializers import (
    RedeemInputSerializer,
    MarkPayoutsPaidInputSerializer,
    PayoutFilterSerializer,
    VoucherDetailSerializer,
    TransactionSerializer,
    PayoutItemSerializer,
)
from .services import redeem_voucher, mark_payouts_paid

logger = logging.getLogger(__name__)


# Response serializers for API documentation
class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    code = serializers.CharField()


class RedeemResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    voucher = inline_serializer('RedeemedVoucher', {
        'id': serializers.UUIDField(),
        'redemptionCode': serializers.CharField(),
        'giftItemId': serializers.UUIDField(),
        'itemName': serializers.CharField(),
        'redeemedAt': serializers.DateTimeField(),
        'senderName': serializers.CharField(),
        'recipientName': serializers.CharField(),
    })
    merchantLocation = inline_serializer('RedeemedAtLocation', {
        'id': serializers.UUIDField(),
        'name': serializers.CharField(),
        'address': serializers.CharField(),
    })


@extend_schema(
    responses={200: VoucherDetailSerializer, 404: ErrorResponseSerializer},
    description="Get a voucher by its redemption code.",
    tags=['vouchers'],
)
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def voucher_detail(request, code):
    voucher = (
        Voucher.objects
        .select_related('gift_item__merchant', 'gift_item__category')
        .prefetch_related('valid_locations')
        .filter(redemption_code=code)
        .first()
    )
    if voucher is None:
        raise VoucherNotFound()
    return Response(VoucherDetailSerializer(voucher).data)


@extend_schema(
    request=RedeemInputSerializer,
    responses={
        200: RedeemResponseSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
    },
    description=(
        "Redeem a voucher at the merchant location whose QR code was scanned. "
        "Failures carry a stable code: voucher_not_found, already_redeemed, "
        "payment_processing, voucher_refunded, voucher_not_redeemable, "
        "location_not_found or location_not_valid."
    ),
    tags=['vouchers'],
)
@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def voucher_redeem(request, code):
    """Redeem voucher - thin HTTP handler."""
    serializer = RedeemInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    voucher, location = redeem_voucher(
        code=code,
        merchant_location_id=serializer.validated_data['merchantLocationId'],
    )

    return Response({
        'success': True,
        'message': 'Voucher redeemed successfully',
        'voucher': {
            'id': str(voucher.id),
            'redemptionCode': voucher.redemption_code,
            'giftItemId': str(voucher.gift_item_id),
            'itemName': voucher.gift_item.name,
            'redeemedAt': voucher.redeemed_at,
            'senderName': voucher.sender_name,
            'recipientName': voucher.recipient_name,
        },
        'merchantLocation': {
            'id': str(location.id),
            'name': location.name,
            'address': location.address,
        },
    })


# =============================================================================
# Staff back-office
# =============================================================================

class AdminTransactionViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only view of the ledger."""

    queryset = Transaction.objects.all()
    serializer_class = TransactionSerializer
    permission_classes = [IsAdminUser]

    def get_queryset(self):
        queryset = super().get_queryset()
        merchant_id = self.request.query_params.get('merchant')
        if merchant_id:
            queryset = queryset.filter(merchant_id=merchant_id)
        return queryset


@extend_schema(
    parameters=[
        OpenApiParameter('merchant', OpenApiTypes.UUID),
        OpenApiParameter('status', OpenApiTypes.STR, enum=['pending', 'paid', 'reversed']),
    ],
    responses={200: PayoutItemSerializer(many=True)},
    description="List payout items.",
    tags=['admin'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def admin_payout_list(request):
    filter_serializer = PayoutFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)
    params = filter_serializer.validated_data

    queryset = PayoutItem.objects.select_related('merchant', 'voucher')
    if 'merchant' in params:
        queryset = queryset.filter(merchant_id=params['merchant'])
    if 'status' in params:
        queryset = queryset.filter(status=params['status'])

    return Response(PayoutItemSerializer(queryset, many=True).data)


@extend_schema(
    request=MarkPayoutsPaidInputSerializer,
    responses={
        200: inline_serializer('MarkPaidResponse', {'updated': serializers.IntegerField()}),
        404: ErrorResponseSerializer,
    },
    description="Mark pending payout items as paid.",
    tags=['admin'],
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def admin_mark_payouts_paid(request):
    serializer = MarkPayoutsPaidInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    updated = mark_payouts_paid(
        payout_item_ids=serializer.validated_data['payoutItemIds'],
        transfer_id=serializer.validated_data.get('transferId', ''),
    )
    return Response({'updated': updated})
