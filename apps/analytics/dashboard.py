"""
Merchant Dashboard
==================

Read-only financial summary for one merchant, shown in the café portal.

Every figure covers the reporting window: the last 30 days, but never
earlier than ``settings.DASHBOARD_MIN_START``. Query rows are turned into
small frozen records (``VoucherTotals``, ``PurchaseTotals``,
``FeeSettings``, ``PayoutLine``) that quantize money to cents when they
are built, so the arithmetic in ``MerchantDashboard`` only ever sees
clean ``Decimal`` values.

Example:
    Building the dashboard for the signed-in café::

        from apps.analytics.dashboard import MerchantDashboard

        data = MerchantDashboard(merchant).build()
        print(data['balance'], data['nextPayoutDate'])

Note:
    Nothing here writes to the database.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from django.conf import settings
from django.db.models import Count, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from apps.vouchers.fees import estimate_stripe_fee, to_money
from apps.vouchers.models import (
    Voucher,
    VoucherStatus,
    ACTIVE_STATUSES,
    SOLD_STATUSES,
    Transaction,
    TransactionType,
    TransactionStatus,
    PayoutItem,
    PayoutStatus,
)

PAYOUT_MINIMUM = Decimal('5.00')
RECENT_LIMIT = 7
TOP_ITEMS_LIMIT = 5
ACTIVITY_DAYS = 7
PAYOUT_WEEKDAY = 4  # Friday
PAYOUT_WEEKS = (2, 4)


def _money(value) -> float:
    return float(to_money(value))


def _day(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        value = timezone.localtime(value) if timezone.is_aware(value) else value
        value = value.date()
    return value.isoformat()


def window_start(now=None) -> datetime:
    """Start of the reporting window."""
    now = now or timezone.now()
    days = getattr(settings, 'DASHBOARD_WINDOW_DAYS', 30)
    return max(now - timedelta(days=days), settings.DASHBOARD_MIN_START)


def next_payout_date(today: date = None) -> date:
    """
    Next payout day: the 2nd or 4th Friday of a month, strictly after today.

    Args:
        today (date, optional): Reference day, defaults to the local date.

    Returns:
        date: The payout day.

    Example:
        >>> next_payout_date(date(2025, 10, 9))
        datetime.date(2025, 10, 10)
        >>> next_payout_date(date(2025, 10, 10))
        datetime.date(2025, 10, 24)
    """
    day = (today or timezone.localdate()) + timedelta(days=1)
    while True:
        if day.weekday() == PAYOUT_WEEKDAY and (day.day - 1) // 7 + 1 in PAYOUT_WEEKS:
            return day
        day += timedelta(days=1)


# =============================================================================
# Records
# =============================================================================

@dataclass(frozen=True)
class VoucherTotals:
    """Count and face value of a group of vouchers."""
    count: int
    value: Decimal

    def __post_init__(self):
        if self.count < 0:
            raise ValueError('Voucher count cannot be negative')

    @classmethod
    def from_row(cls, row):
        return cls(count=int(row.get('count') or 0), value=to_money(row.get('value')))


@dataclass(frozen=True)
class PurchaseTotals:
    """Completed purchase entries summed for the window."""
    amount: Decimal
    stripe_fees: Decimal
    commission: Decimal

    @classmethod
    def from_lines(cls, lines, commission):
        return cls(
            amount=to_money(sum((line.gross_price for line in lines), Decimal('0'))),
            stripe_fees=to_money(sum((line.stripe_fee for line in lines), Decimal('0'))),
            commission=to_money(commission),
        )


@dataclass(frozen=True)
class FeeSettings:
    """The merchant's Brontie fee as the dashboard applies it."""
    is_active: bool
    commission_rate: Decimal
    activated_at: datetime = None

    def __post_init__(self):
        if not Decimal('0') <= self.commission_rate <= Decimal('1'):
            raise ValueError(f'Commission rate out of range: {self.commission_rate}')

    @classmethod
    def from_merchant(cls, merchant):
        rate = Decimal(str(merchant.commission_rate or 0))
        return cls(
            is_active=merchant.brontie_fee_is_active,
            commission_rate=rate if rate > 0 else Decimal('0'),
            activated_at=merchant.brontie_fee_activated_at,
        )

    def platform_fee(self, net) -> Decimal:
        if not self.is_active:
            return Decimal('0.00')
        return to_money(net * self.commission_rate)


@dataclass(frozen=True)
class PayoutLine:
    """One completed purchase as shown in the payout breakdown."""
    item_name: str
    day: str
    gross_price: Decimal
    stripe_fee: Decimal

    @classmethod
    def from_transaction(cls, entry):
        gross = to_money(entry.amount)
        # A stored fee of zero is kept; only a missing fee is estimated
        fee = to_money(entry.stripe_fee) if entry.stripe_fee is not None else estimate_stripe_fee(gross)
        return cls(
            item_name=entry.gift_item.name,
            day=_day(entry.created_at),
            gross_price=gross,
            stripe_fee=fee,
        )

    @property
    def net_after_stripe(self) -> Decimal:
        return self.gross_price - self.stripe_fee


# =============================================================================
# Dashboard
# =============================================================================

class MerchantDashboard:
    """
    Aggregate vouchers, ledger entries and payouts for one merchant.

    Args:
        merchant (Merchant): The café the dashboard is for.
        now (datetime, optional): Reference time, defaults to now.

    Note:
        ``balance`` follows the café portal's long-standing formula
        ``revenue - stripeFees - commission (if active) + redeemedAmount``;
        ``availableForPayout`` is the figure that matches the ledger.
    """

    def __init__(self, merchant, now=None):
        self.merchant = merchant
        self.now = now or timezone.now()
        self.start = window_start(self.now)
        self.fees = FeeSettings.from_merchant(merchant)

    # -------------------------------------------------------------------------
    # Querysets
    # -------------------------------------------------------------------------

    def vouchers(self):
        return Voucher.objects.filter(
            gift_item__merchant=self.merchant,
            created_at__gte=self.start,
        )

    def completed_transactions(self, transaction_type):
        return Transaction.objects.filter(
            merchant=self.merchant,
            type=transaction_type,
            status=TransactionStatus.COMPLETED,
            created_at__gte=self.start,
            voucher__created_at__gte=self.start,
        )

    # -------------------------------------------------------------------------
    # Voucher figures
    # -------------------------------------------------------------------------

    def voucher_totals(self, statuses) -> VoucherTotals:
        row = self.vouchers().filter(status__in=statuses).aggregate(
            count=Count('id'),
            value=Sum('gift_item__price'),
        )
        return VoucherTotals.from_row(row)

    def top_selling_items(self):
        rows = (
            self.vouchers()
            .filter(status__in=SOLD_STATUSES)
            .values('gift_item_id', 'gift_item__name')
            .annotate(sales=Count('id'), revenue=Sum('gift_item__price'))
            .order_by('-sales', 'gift_item__name')[:TOP_ITEMS_LIMIT]
        )
        return [
            {
                'id': str(row['gift_item_id']),
                'name': row['gift_item__name'],
                'sales': row['sales'],
                'revenue': _money(row['revenue']),
            }
            for row in rows
        ]

    def recent_purchases(self):
        vouchers = (
            self.vouchers()
            .filter(status__in=SOLD_STATUSES)
            .select_related('gift_item')
            .order_by('-created_at')[:RECENT_LIMIT]
        )
        return [
            {
                'date': _day(voucher.created_at),
                'item': voucher.gift_item.name,
                'value': _money(voucher.gift_item.price),
                'status': voucher.status,
                'sender': voucher.sender_name or 'Anonymous',
                'recipient': voucher.recipient_name or 'Anonymous',
            }
            for voucher in vouchers
        ]

    def recent_redemptions(self):
        vouchers = (
            self.vouchers()
            .filter(status=VoucherStatus.REDEEMED)
            .select_related('gift_item')
            .order_by('-redeemed_at', '-updated_at')[:RECENT_LIMIT]
        )
        result = []
        for voucher in vouchers:
            redeemed_day = _day(voucher.redeemed_at or voucher.updated_at)
            result.append({
                'date': redeemed_day,
                'item': voucher.gift_item.name,
                'value': _money(voucher.gift_item.price),
                'redeemedAt': redeemed_day,
            })
        return result

    def daily_activity(self):
        """Purchased and redeemed voucher counts for each of the last 7 days."""
        rows = (
            self.vouchers()
            .annotate(day=TruncDate('created_at'))
            .values('day', 'status')
            .annotate(count=Count('id'))
        )
        by_day = {}
        for row in rows:
            counts = by_day.setdefault(_day(row['day']), {'purchased': 0, 'redeemed': 0})
            if row['status'] in ACTIVE_STATUSES:
                counts['purchased'] += row['count']
            elif row['status'] == VoucherStatus.REDEEMED:
                counts['redeemed'] += row['count']

        today = timezone.localdate(self.now)
        activity = []
        for offset in range(ACTIVITY_DAYS - 1, -1, -1):
            day = (today - timedelta(days=offset)).isoformat()
            counts = by_day.get(day, {'purchased': 0, 'redeemed': 0})
            activity.append({'date': day, **counts})
        return activity

    # -------------------------------------------------------------------------
    # Ledger figures
    # -------------------------------------------------------------------------

    def payout_lines(self):
        entries = (
            self.completed_transactions(TransactionType.PURCHASE)
            .select_related('gift_item')
            .order_by('-created_at')
        )
        return [PayoutLine.from_transaction(entry) for entry in entries]

    def purchase_totals(self, lines) -> PurchaseTotals:
        commission = (
            self.completed_transactions(TransactionType.PURCHASE)
            .aggregate(total=Sum('brontie_commission'))['total']
        )
        return PurchaseTotals.from_lines(lines, commission)

    def redeemed_amount(self) -> Decimal:
        total = (
            self.completed_transactions(TransactionType.REDEMPTION)
            .aggregate(total=Sum('amount'))['total']
        )
        return to_money(total)

    def paid_out_value(self) -> Decimal:
        total = PayoutItem.objects.filter(
            merchant=self.merchant,
            status=PayoutStatus.PAID,
            paid_out_at__gte=self.start,
        ).aggregate(total=Sum('amount_payable'))['total']
        return to_money(total)

    def balance(self, revenue, purchases: PurchaseTotals, redeemed) -> Decimal:
        commission = purchases.commission if self.fees.is_active else Decimal('0.00')
        return to_money(revenue - purchases.stripe_fees - commission + redeemed)

    # -------------------------------------------------------------------------
    # Merchant blocks
    # -------------------------------------------------------------------------

    def payout_details(self):
        merchant = self.merchant
        return {
            'accountHolderName': merchant.account_holder_name,
            'iban': merchant.iban,
            'bic': merchant.bic,
        }

    def stripe_connect_settings(self):
        merchant = self.merchant
        return {
            'isConnected': merchant.stripe_is_connected,
            'onboardingCompleted': merchant.stripe_onboarding_completed,
            'chargesEnabled': merchant.stripe_charges_enabled,
            'payoutsEnabled': merchant.stripe_payouts_enabled,
            'detailsSubmitted': merchant.stripe_details_submitted,
        }

    def account_age(self) -> int:
        return max((self.now - self.merchant.created_at).days, 0)

    # -------------------------------------------------------------------------
    # Assembly
    # -------------------------------------------------------------------------

    def build(self):
        """
        Assemble the full dashboard payload.

        Returns:
            dict: camelCase keys as consumed by the café portal. Money
            values are floats rounded to cents, dates are ISO strings.
        """
        active = self.voucher_totals(ACTIVE_STATUSES)
        redeemed = self.voucher_totals([VoucherStatus.REDEEMED])
        sold = self.voucher_totals(SOLD_STATUSES)

        lines = self.payout_lines()
        purchases = self.purchase_totals(lines)
        redeemed_amount = self.redeemed_amount()
        balance = self.balance(sold.value, purchases, redeemed_amount)

        net_after_stripe = purchases.amount - purchases.stripe_fees
        platform_fee = self.fees.platform_fee(net_after_stripe)

        return {
            'merchantId': str(self.merchant.id),
            'activeVouchers': active.count,
            'activeVouchersValue': _money(active.value),
            'redeemedVouchers': redeemed.count,
            'redeemedVouchersValue': _money(redeemed.value),
            'paidOutValue': _money(self.paid_out_value()),
            'totalRevenue': _money(sold.value),
            'topSellingItems': self.top_selling_items(),
            'balance': _money(balance),
            'nextPayoutDate': next_payout_date(timezone.localdate(self.now)).isoformat(),
            'payoutEligible': balance >= PAYOUT_MINIMUM,
            'recentRedemptions': self.recent_redemptions(),
            'recentPurchases': self.recent_purchases(),
            'dailyActivity': self.daily_activity(),
            'payoutDetails': self.payout_details(),
            'availableForPayout': _money(net_after_stripe - platform_fee),
            'payoutTransactions': [
                {
                    'itemName': line.item_name,
                    'date': line.day,
                    'grossPrice': _money(line.gross_price),
                    'stripeFee': _money(line.stripe_fee),
                    'netAfterStripe': _money(line.net_after_stripe),
                    'platformFee': _money(self.fees.platform_fee(line.net_after_stripe)),
                }
                for line in lines
            ],
            'payoutSummary': {
                'grossTotal': _money(purchases.amount),
                'totalStripeFees': _money(purchases.stripe_fees),
                'netAfterStripe': _money(net_after_stripe),
                'platformFee': _money(platform_fee),
            },
            'brontieFee': {
                'isActive': self.fees.is_active,
                'commissionRate': float(self.fees.commission_rate),
                'activatedAt': self.fees.activated_at,
            },
            'accountAge': self.account_age(),
            'stripeConnectSettings': self.stripe_connect_settings(),
        }
