from rest_framework import serializers

from apps.vouchers.models import Voucher

from .emails import voucher_url


# =============================================================================
# INPUT SERIALIZERS
# =============================================================================

class CheckoutInputSerializer(serializers.Serializer):
    giftItemId = serializers.UUIDField()
    senderName = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    recipientName = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    senderEmail = serializers.EmailField(required=False, allow_blank=True, default='')
    recipientEmail = serializers.EmailField(required=False, allow_blank=True, default='')
    ref = serializers.CharField(max_length=64, required=False, allow_blank=True, default='')


class CheckoutSuccessInputSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=255)


# =============================================================================
# OUTPUT SERIALIZERS
# =============================================================================

class CheckoutVoucherSerializer(serializers.ModelSerializer):
    """Voucher summary shown on the checkout success page."""

    redemptionCode = serializers.CharField(source='redemption_code', read_only=True)
    itemName = serializers.CharField(source='gift_item.name', read_only=True)
    merchantName = serializers.CharField(source='gift_item.merchant.name', read_only=True)
    senderName = serializers.CharField(source='sender_name', read_only=True)
    recipientName = serializers.CharField(source='recipient_name', read_only=True)
    voucherUrl = serializers.SerializerMethodField()

    class Meta:
        model = Voucher
        fields = [
            'id', 'redemptionCode', 'status', 'amount',
            'itemName', 'merchantName', 'senderName', 'recipientName',
            'voucherUrl',
        ]
        read_only_fields = fields

    def get_voucherUrl(self, obj):
        return voucher_url(obj)
