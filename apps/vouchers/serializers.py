from rest_framework import serializers
from apps.merchants.serializers import (
    CategorySerializer,
    MerchantLocationSerializer,
    MerchantPublicSerializer,
)
from apps.merchants.models import GiftItem
from .models import Voucher, Transaction, PayoutItem


# =============================================================================
# Input Serializers
# =============================================================================

class RedeemInputSerializer(serializers.Serializer):
    """Validate the scanned location for a redemption."""

    merchantLocationId = serializers.UUIDField()


class MarkPayoutsPaidInputSerializer(serializers.Serializer):
    """
    Validate a payout settlement.

    Fields:
        payoutItemIds (list[UUID]): Payout items covered by the transfer
        transferId (str): Bank or Stripe transfer reference
    """

    payoutItemIds = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    transferId = serializers.CharField(max_length=255, required=False, allow_blank=True)


class PayoutFilterSerializer(serializers.Serializer):
    merchant = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=['pending', 'paid', 'reversed'], required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class VoucherGiftItemSerializer(serializers.ModelSerializer):
    merchant = MerchantPublicSerializer(read_only=True)
    category = CategorySerializer(read_only=True)

    class Meta:
        model = GiftItem
        fields = ['id', 'name', 'description', 'price', 'image_url', 'merchant', 'category']


class VoucherDetailSerializer(serializers.ModelSerializer):
    """Voucher as shown to the recipient."""

    gift_item = VoucherGiftItemSerializer(read_only=True)
    valid_locations = MerchantLocationSerializer(many=True, read_only=True)

    class Meta:
        model = Voucher
        fields = [
            'id',
            'redemption_code',
            'status',
            'amount',
            'sender_name',
            'recipient_name',
            'gift_item',
            'valid_locations',
            'expires_at',
            'created_at',
            'redeemed_at',
        ]


class TransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Transaction
        fields = [
            'id',
            'voucher',
            'merchant',
            'gift_item',
            'type',
            'status',
            'amount',
            'stripe_fee',
            'brontie_commission',
            'merchant_payout',
            'stripe_payment_intent_id',
            'completed_at',
            'created_at',
        ]
        read_only_fields = fields


class PayoutItemSerializer(serializers.ModelSerializer):
    merchant_name = serializers.CharField(source='merchant.name', read_only=True)
    redemption_code = serializers.CharField(source='voucher.redemption_code', read_only=True)

    class Meta:
        model = PayoutItem
        fields = [
            'id',
            'voucher',
            'redemption_code',
            'merchant',
            'merchant_name',
            'amount_payable',
            'brontie_fee',
            'stripe_fee',
            'status',
            'paid_out_at',
            'transfer_id',
            'created_at',
        ]
        read_only_fields = fields
