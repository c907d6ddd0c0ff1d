"""Services for voucher business logic."""

from .redemption import redeem_voucher, ensure_redeemable
from .lifecycle import (
    find_by_payment_intent,
    issue_voucher,
    confirm_voucher,
    link_referral,
    refund_voucher,
    dispute_voucher,
    expire_vouchers,
)
from .payouts import mark_payouts_paid

__all__ = [
    # Redemption
    'redeem_voucher',
    'ensure_redeemable',
    # Lifecycle
    'find_by_payment_intent',
    'issue_voucher',
    'confirm_voucher',
    'link_referral',
    'refund_voucher',
    'dispute_voucher',
    'expire_vouchers',
    # Payouts
    'mark_payouts_paid',
]
