"""Ledger totals for the café transaction list."""

from django.db.models import Count, Sum

from apps.vouchers.fees import to_money
from apps.vouchers.models import Transaction, TransactionType, TransactionStatus


def completed_transactions(merchant):
    """Completed ledger entries of one merchant, newest first."""
    return (
        Transaction.objects
        .filter(merchant=merchant, status=TransactionStatus.COMPLETED)
        .select_related('gift_item', 'voucher')
    )


def transaction_summary(merchant) -> dict:
    """
    Totals per transaction type over the merchant's whole history.

    Every type is present, with zero totals when the merchant has no
    entry of that type.
    """
    rows = (
        Transaction.objects
        .filter(merchant=merchant, status=TransactionStatus.COMPLETED)
        .order_by()
        .values('type')
        .annotate(
            count=Count('id'),
            amount=Sum('amount'),
            stripe_fees=Sum('stripe_fee'),
            commission=Sum('brontie_commission'),
            payout=Sum('merchant_payout'),
        )
    )
    by_type = {row['type']: row for row in rows}

    summary = {}
    for transaction_type in TransactionType.values:
        row = by_type.get(transaction_type, {})
        summary[transaction_type] = {
            'count': row.get('count', 0),
            'totalAmount': float(to_money(row.get('amount'))),
            'totalStripeFees': float(to_money(row.get('stripe_fees'))),
            'totalCommission': float(to_money(row.get('commission'))),
            'totalPayout': float(to_money(row.get('payout'))),
        }
    return summary
