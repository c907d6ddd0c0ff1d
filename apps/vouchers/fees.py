"""
Fee arithmetic shared by redemption, webhooks and the dashboard.

All amounts are euro ``Decimal`` values quantized to cents with
ROUND_HALF_UP. Stripe reports amounts in cents; convert them with
``from_cents`` before doing anything else.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal('0.01')

# Stripe standard EEA card pricing
STRIPE_PERCENT_FEE = Decimal('0.014')
STRIPE_FIXED_FEE = Decimal('0.25')


def to_money(value) -> Decimal:
    """Quantize any numeric value to euro cents."""
    if value is None:
        return Decimal('0.00')
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def from_cents(cents) -> Decimal:
    """Convert a Stripe integer amount in cents to euro."""
    return to_money(Decimal(int(cents or 0)) / 100)


def to_cents(amount) -> int:
    return int((to_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def estimate_stripe_fee(amount) -> Decimal:
    """Estimated Stripe fee: 1.4% + 0.25 EUR."""
    return to_money(to_money(amount) * STRIPE_PERCENT_FEE + STRIPE_FIXED_FEE)


@dataclass(frozen=True)
class PayoutBreakdown:
    """How one sale splits between Stripe, Brontie and the merchant."""
    amount: Decimal
    stripe_fee: Decimal
    net_after_stripe: Decimal
    brontie_commission: Decimal
    merchant_payout: Decimal


def split_payout(amount, stripe_fee=None, commission_rate=Decimal('0')) -> PayoutBreakdown:
    """
    Split a sale into Stripe fee, Brontie commission and merchant payout.

    Args:
        amount: Gross amount paid by the customer.
        stripe_fee: Actual Stripe fee, or None/0 to use the estimate.
        commission_rate: Brontie commission on the amount left after
            Stripe; pass 0 when the merchant's fee is not active.

    Returns:
        PayoutBreakdown with every figure quantized to cents.
    """
    amount = to_money(amount)
    fee = to_money(stripe_fee) if stripe_fee else estimate_stripe_fee(amount)
    net = amount - fee
    commission = to_money(net * Decimal(str(commission_rate or 0)))
    return PayoutBreakdown(
        amount=amount,
        stripe_fee=fee,
        net_after_stripe=net,
        brontie_commission=commission,
        merchant_payout=net - commission,
    )
