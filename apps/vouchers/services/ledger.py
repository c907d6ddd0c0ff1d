"""Append-only ledger writes for voucher money events."""

import logging

from django.utils import timezone

from ..fees import split_payout, to_money
from ..models import (
    Transaction,
    TransactionType,
    TransactionStatus,
    PayoutItem,
    PayoutStatus,
)

logger = logging.getLogger(__name__)


def _entry_fields(voucher):
    gift_item = voucher.gift_item
    return {
        'voucher': voucher,
        'merchant': gift_item.merchant,
        'gift_item': gift_item,
        'stripe_payment_intent_id': voucher.payment_intent_id or '',
        'customer_email': voucher.email,
        'sender_name': voucher.sender_name,
        'recipient_name': voucher.recipient_name,
    }


def voucher_value(voucher):
    """Amount the customer paid, falling back to the item price."""
    return to_money(voucher.amount or voucher.gift_item.price)


def record_redemption(voucher) -> Transaction:
    """Write the ``redemption`` entry for a voucher just redeemed."""
    return Transaction.objects.create(
        type=TransactionType.REDEMPTION,
        status=TransactionStatus.COMPLETED,
        amount=voucher_value(voucher),
        completed_at=timezone.now(),
        **_entry_fields(voucher),
    )


def record_settlement(voucher):
    """
    Write the merchant settlement for a redeemed voucher.

    The merchant is paid on redemption, not on purchase, so this writes
    the completed ``purchase`` entry with the fee split and the pending
    ``PayoutItem`` that the next payout run will pick up.

    Args:
        voucher: Voucher with ``gift_item`` and its merchant loaded.

    Returns:
        tuple: (Transaction, PayoutItem)
    """
    merchant = voucher.gift_item.merchant
    breakdown = split_payout(
        voucher_value(voucher),
        stripe_fee=voucher.stripe_fee,
        commission_rate=merchant.effective_commission_rate,
    )

    purchase = Transaction.objects.create(
        type=TransactionType.PURCHASE,
        status=TransactionStatus.COMPLETED,
        amount=breakdown.amount,
        stripe_fee=breakdown.stripe_fee,
        brontie_commission=breakdown.brontie_commission,
        merchant_payout=breakdown.merchant_payout,
        completed_at=timezone.now(),
        **_entry_fields(voucher),
    )
    payout = PayoutItem.objects.create(
        voucher=voucher,
        merchant=merchant,
        amount_payable=breakdown.merchant_payout,
        brontie_fee=breakdown.brontie_commission,
        stripe_fee=breakdown.stripe_fee,
        status=PayoutStatus.PENDING,
    )
    logger.info(
        'Settlement recorded for voucher %s: payable %s, commission %s, stripe fee %s',
        voucher.redemption_code, breakdown.merchant_payout,
        breakdown.brontie_commission, breakdown.stripe_fee,
    )
    return purchase, payout


def record_refund(voucher, amount) -> Transaction:
    """Write the ``refund`` entry for a fully refunded voucher."""
    return Transaction.objects.create(
        type=TransactionType.REFUND,
        status=TransactionStatus.COMPLETED,
        amount=to_money(amount),
        completed_at=timezone.now(),
        **_entry_fields(voucher),
    )


def record_dispute(voucher, amount) -> Transaction:
    """Write a failed ``purchase`` entry for a disputed charge."""
    return Transaction.objects.create(
        type=TransactionType.PURCHASE,
        status=TransactionStatus.FAILED,
        amount=to_money(amount),
        **_entry_fields(voucher),
    )
