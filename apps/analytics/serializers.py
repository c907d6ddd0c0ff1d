"""
Serializers for the merchant dashboard and transaction list.

The dashboard serializers only document the payload for the API schema;
the dashboard is assembled as plain dictionaries by ``MerchantDashboard``.
"""

from rest_framework import serializers

from apps.vouchers.models import Transaction, TransactionType


class TopSellingItemSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    sales = serializers.IntegerField()
    revenue = serializers.FloatField()


class RecentPurchaseSerializer(serializers.Serializer):
    date = serializers.DateField()
    item = serializers.CharField()
    value = serializers.FloatField()
    status = serializers.CharField()
    sender = serializers.CharField()
    recipient = serializers.CharField()


class RecentRedemptionSerializer(serializers.Serializer):
    date = serializers.DateField()
    item = serializers.CharField()
    value = serializers.FloatField()
    redeemedAt = serializers.DateField()


class DailyActivitySerializer(serializers.Serializer):
    date = serializers.DateField()
    purchased = serializers.IntegerField()
    redeemed = serializers.IntegerField()


class PayoutTransactionSerializer(serializers.Serializer):
    itemName = serializers.CharField()
    date = serializers.DateField()
    grossPrice = serializers.FloatField()
    stripeFee = serializers.FloatField()
    netAfterStripe = serializers.FloatField()
    platformFee = serializers.FloatField()


class PayoutSummarySerializer(serializers.Serializer):
    grossTotal = serializers.FloatField()
    totalStripeFees = serializers.FloatField()
    netAfterStripe = serializers.FloatField()
    platformFee = serializers.FloatField()


class PayoutDetailsSerializer(serializers.Serializer):
    accountHolderName = serializers.CharField()
    iban = serializers.CharField()
    bic = serializers.CharField()


class BrontieFeeSerializer(serializers.Serializer):
    isActive = serializers.BooleanField()
    commissionRate = serializers.FloatField()
    activatedAt = serializers.DateTimeField(allow_null=True)


class StripeConnectSettingsSerializer(serializers.Serializer):
    isConnected = serializers.BooleanField()
    onboardingCompleted = serializers.BooleanField()
    chargesEnabled = serializers.BooleanField()
    payoutsEnabled = serializers.BooleanField()
    detailsSubmitted = serializers.BooleanField()


class MerchantDashboardSerializer(serializers.Serializer):
    """Response serializer for the café dashboard."""
    merchantId = serializers.UUIDField()
    activeVouchers = serializers.IntegerField()
    activeVouchersValue = serializers.FloatField()
    redeemedVouchers = serializers.IntegerField()
    redeemedVouchersValue = serializers.FloatField()
    paidOutValue = serializers.FloatField()
    totalRevenue = serializers.FloatField()
    topSellingItems = TopSellingItemSerializer(many=True)
    balance = serializers.FloatField()
    nextPayoutDate = serializers.DateField()
    payoutEligible = serializers.BooleanField()
    recentRedemptions = RecentRedemptionSerializer(many=True)
    recentPurchases = RecentPurchaseSerializer(many=True)
    dailyActivity = DailyActivitySerializer(many=True)
    payoutDetails = PayoutDetailsSerializer()
    availableForPayout = serializers.FloatField()
    payoutTransactions = PayoutTransactionSerializer(many=True)
    payoutSummary = PayoutSummarySerializer()
    brontieFee = BrontieFeeSerializer()
    accountAge = serializers.IntegerField()
    stripeConnectSettings = StripeConnectSettingsSerializer()


class ErrorSerializer(serializers.Serializer):
    """Standard error response serializer."""
    error = serializers.CharField()
    code = serializers.CharField()


class TransactionFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the café transaction list.

    Query Parameters:
        type (str): purchase, redemption or refund
    """

    type = serializers.ChoiceField(choices=TransactionType.choices, required=False)


class CafeTransactionSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source='gift_item.name', read_only=True)
    item_price = serializers.DecimalField(
        source='gift_item.price', max_digits=8, decimal_places=2, read_only=True
    )
    redemption_code = serializers.CharField(source='voucher.redemption_code', read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id',
            'type',
            'status',
            'amount',
            'stripe_fee',
            'brontie_commission',
            'merchant_payout',
            'customer_email',
            'sender_name',
            'recipient_name',
            'item_name',
            'item_price',
            'redemption_code',
            'created_at',
            'completed_at',
        ]
        read_only_fields = fields


class TransactionTotalsSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    totalAmount = serializers.FloatField()
    totalStripeFees = serializers.FloatField()
    totalCommission = serializers.FloatField()
    totalPayout = serializers.FloatField()


class TransactionSummarySerializer(serializers.Serializer):
    purchase = TransactionTotalsSerializer()
    redemption = TransactionTotalsSerializer()
    refund = TransactionTotalsSerializer()


class CafeTransactionListSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    next = serializers.URLField(allow_null=True)
    previous = serializers.URLField(allow_null=True)
    results = CafeTransactionSerializer(many=True)
    summary = TransactionSummarySerializer()
