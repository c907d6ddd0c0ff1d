from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from datetime import timedelta
from decimal import Decimal
import secrets
import string
import uuid

from .exceptions import ImmutableRecordError


REDEMPTION_CODE_ALPHABET = string.ascii_letters + string.digits + '_-'
REDEMPTION_CODE_LENGTH = 10
VOUCHER_LIFETIME = timedelta(days=5 * 365)


def generate_redemption_code():
    """Return a random URL-safe code that no voucher uses yet."""
    while True:
        code = ''.join(
            secrets.choice(REDEMPTION_CODE_ALPHABET) for _ in range(REDEMPTION_CODE_LENGTH)
        )
        if not Voucher.objects.filter(redemption_code=code).exists():
            return code


class VoucherStatus(models.TextChoices):
    ISSUED = 'issued', 'Issued'
    PENDING = 'pending', 'Pending'
    UNREDEEMED = 'unredeemed', 'Unredeemed'
    REDEEMED = 'redeemed', 'Redeemed'
    REFUNDED = 'refunded', 'Refunded'
    DISPUTED = 'disputed', 'Disputed'
    EXPIRED = 'expired', 'Expired'


# Statuses that still count as sold but not yet used
ACTIVE_STATUSES = (VoucherStatus.ISSUED, VoucherStatus.PENDING, VoucherStatus.UNREDEEMED)
SOLD_STATUSES = ACTIVE_STATUSES + (VoucherStatus.REDEEMED,)

ALLOWED_TRANSITIONS = {
    VoucherStatus.ISSUED: {
        VoucherStatus.UNREDEEMED, VoucherStatus.REFUNDED,
        VoucherStatus.DISPUTED, VoucherStatus.EXPIRED,
    },
    VoucherStatus.PENDING: {
        VoucherStatus.UNREDEEMED, VoucherStatus.REFUNDED,
        VoucherStatus.DISPUTED, VoucherStatus.EXPIRED,
    },
    VoucherStatus.UNREDEEMED: {
        VoucherStatus.REDEEMED, VoucherStatus.REFUNDED,
        VoucherStatus.DISPUTED, VoucherStatus.EXPIRED,
    },
    VoucherStatus.REDEEMED: {VoucherStatus.DISPUTED},
    VoucherStatus.REFUNDED: {VoucherStatus.DISPUTED},
    VoucherStatus.DISPUTED: {VoucherStatus.REFUNDED},
    VoucherStatus.EXPIRED: {VoucherStatus.REFUNDED, VoucherStatus.DISPUTED},
}


class Voucher(models.Model):
    """One purchased gift, identified to customers by its redemption code."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    redemption_code = models.CharField(
        max_length=REDEMPTION_CODE_LENGTH,
        unique=True,
        db_index=True,
        editable=False
    )
    status = models.CharField(
        max_length=20,
        choices=VoucherStatus.choices,
        default=VoucherStatus.ISSUED
    )

    # What was bought
    gift_item = models.ForeignKey(
        'merchants.GiftItem',
        on_delete=models.PROTECT,
        related_name='vouchers'
    )
    product_sku = models.CharField(max_length=100, blank=True)
    valid_locations = models.ManyToManyField(
        'merchants.MerchantLocation',
        related_name='vouchers',
        blank=True
    )

    # Money
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    amount_gross = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    stripe_fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    # Payment reference
    payment_intent_id = models.CharField(max_length=255, unique=True, null=True, blank=True)

    # People
    email = models.EmailField(blank=True)
    sender_name = models.CharField(max_length=200, blank=True)
    recipient_name = models.CharField(max_length=200, blank=True)
    recipient_email = models.EmailField(blank=True)

    # Referral chain
    recipient_token = models.CharField(max_length=64, unique=True, null=True, blank=True)
    recipient_became_sender = models.BooleanField(default=False)
    recipient_linked_sender_email = models.EmailField(blank=True)

    # Lifecycle
    expires_at = models.DateTimeField(null=True, blank=True)
    issued_at = models.DateTimeField(default=timezone.now)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    redeemed_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    disputed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'vouchers'
        indexes = [
            models.Index(fields=['status', 'created_at']),
            models.Index(fields=['gift_item', 'status']),
            models.Index(fields=['payment_intent_id']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.redemption_code} ({self.status})"

    def save(self, *args, **kwargs):
        """Fill in the redemption code and expiry on first save."""
        if not self.redemption_code:
            self.redemption_code = generate_redemption_code()
        if not self.expires_at:
            self.expires_at = (self.issued_at or timezone.now()) + VOUCHER_LIFETIME
        super().save(*args, **kwargs)

    @property
    def merchant(self):
        return self.gift_item.merchant

    def can_transition_to(self, new_status):
        return new_status in ALLOWED_TRANSITIONS.get(self.status, set())


class TransactionType(models.TextChoices):
    PURCHASE = 'purchase', 'Purchase'
    REDEMPTION = 'redemption', 'Redemption'
    REFUND = 'refund', 'Refund'


class TransactionStatus(models.TextChoices):
    COMPLETED = 'completed', 'Completed'
    PENDING = 'pending', 'Pending'
    FAILED = 'failed', 'Failed'
    REFUNDED = 'refunded', 'Refunded'


class Transaction(models.Model):
    """
    Ledger entry for one monetary event.

    Entries are append-only: saving an existing row or deleting one
    raises ``ImmutableRecordError``. Corrections are new entries.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    merchant = models.ForeignKey(
        'merchants.Merchant',
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    gift_item = models.ForeignKey(
        'merchants.GiftItem',
        on_delete=models.PROTECT,
        related_name='transactions'
    )
    type = models.CharField(max_length=20, choices=TransactionType.choices)
    status = models.CharField(
        max_length=20,
        choices=TransactionStatus.choices,
        default=TransactionStatus.COMPLETED
    )

    amount = models.DecimalField(max_digits=10, decimal_places=2)
    stripe_fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    brontie_commission = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00')
    )
    merchant_payout = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    stripe_payment_intent_id = models.CharField(max_length=255, blank=True)
    customer_email = models.EmailField(blank=True)
    sender_name = models.CharField(max_length=200, blank=True)
    recipient_name = models.CharField(max_length=200, blank=True)

    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'transactions'
        indexes = [
            models.Index(fields=['merchant', 'type', 'status', 'created_at']),
            models.Index(fields=['voucher', 'type']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.type} {self.amount} EUR ({self.status})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError('Ledger transactions cannot be modified.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError('Ledger transactions cannot be deleted.')


class RedemptionLog(models.Model):
    """Where and when a voucher was redeemed."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        related_name='redemption_logs'
    )
    merchant_location = models.ForeignKey(
        'merchants.MerchantLocation',
        on_delete=models.PROTECT,
        related_name='redemption_logs'
    )
    timestamp = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'redemption_logs'
        indexes = [
            models.Index(fields=['merchant_location', 'timestamp']),
        ]
        ordering = ['-timestamp']

    def __str__(self):
        return f"{self.voucher.redemption_code} @ {self.merchant_location.name}"


class PayoutStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'
    REVERSED = 'reversed', 'Reversed'


class PayoutItem(models.Model):
    """What a merchant is owed for one redeemed voucher."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    voucher = models.ForeignKey(
        Voucher,
        on_delete=models.PROTECT,
        related_name='payout_items'
    )
    merchant = models.ForeignKey(
        'merchants.Merchant',
        on_delete=models.PROTECT,
        related_name='payout_items'
    )
    amount_payable = models.DecimalField(max_digits=10, decimal_places=2)
    brontie_fee = models.DecimalField(max_digits=10, decimal_places=2)
    stripe_fee = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(
        max_length=20,
        choices=PayoutStatus.choices,
        default=PayoutStatus.PENDING
    )
    paid_out_at = models.DateTimeField(null=True, blank=True)
    transfer_id = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payoutitems'
        indexes = [
            models.Index(fields=['merchant', 'status']),
            models.Index(fields=['voucher']),
            models.Index(fields=['paid_out_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.merchant.name}: {self.amount_payable} EUR ({self.status})"
