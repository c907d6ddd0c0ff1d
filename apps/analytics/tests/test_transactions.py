import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.analytics.transactions import transaction_summary
from apps.vouchers.models import (
    Transaction,
    TransactionType,
    TransactionStatus,
    VoucherStatus,
)


def transactions_url():
    return reverse('analytics:cafe-transactions')


@pytest.fixture
def make_entry(db):
    """Return a factory writing ledger entries for a voucher's merchant."""
    def _make(voucher, entry_type=TransactionType.PURCHASE, entry_status=TransactionStatus.COMPLETED, **kwargs):
        kwargs.setdefault('amount', voucher.amount)
        return Transaction.objects.create(
            voucher=voucher,
            merchant=voucher.gift_item.merchant,
            gift_item=voucher.gift_item,
            type=entry_type,
            status=entry_status,
            **kwargs
        )
    return _make


# =============================================================================
# Summary
# =============================================================================

@pytest.mark.django_db
class TestTransactionSummary:
    """Tests for per-type ledger totals"""

    def test_empty_ledger_has_every_type(self, merchant):
        summary = transaction_summary(merchant)

        assert set(summary) == {'purchase', 'redemption', 'refund'}
        assert summary['purchase'] == {
            'count': 0,
            'totalAmount': 0.0,
            'totalStripeFees': 0.0,
            'totalCommission': 0.0,
            'totalPayout': 0.0,
        }

    def test_totals_completed_entries_only(self, merchant, make_voucher, make_entry):
        first = make_voucher(status=VoucherStatus.REDEEMED)
        second = make_voucher(status=VoucherStatus.REDEEMED)
        disputed = make_voucher(status=VoucherStatus.DISPUTED)
        make_entry(first, stripe_fee=Decimal('0.39'), merchant_payout=Decimal('9.61'))
        make_entry(second, stripe_fee=Decimal('0.39'), merchant_payout=Decimal('9.61'))
        make_entry(first, entry_type=TransactionType.REDEMPTION)
        make_entry(disputed, entry_status=TransactionStatus.FAILED)

        summary = transaction_summary(merchant)

        assert summary['purchase']['count'] == 2
        assert summary['purchase']['totalAmount'] == 20.0
        assert summary['purchase']['totalStripeFees'] == 0.78
        assert summary['purchase']['totalPayout'] == 19.22
        assert summary['redemption']['count'] == 1
        assert summary['refund']['count'] == 0


# =============================================================================
# GET /api/cafes/transactions/
# =============================================================================

@pytest.mark.django_db
class TestCafeTransactionList:
    """Tests for GET /api/cafes/transactions/"""

    def test_requires_cafe_cookie(self, api_client):
        response = api_client.get(transactions_url())

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_staff_jwt_not_accepted(self, staff_client):
        response = staff_client.get(transactions_url())

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_lists_own_completed_entries(self, cafe_client, make_voucher, make_entry, other_gift_item):
        voucher = make_voucher(status=VoucherStatus.REDEEMED)
        make_entry(voucher)
        make_entry(voucher, entry_type=TransactionType.REDEMPTION)
        make_entry(make_voucher(status=VoucherStatus.DISPUTED), entry_status=TransactionStatus.FAILED)
        make_entry(make_voucher(item=other_gift_item))

        response = cafe_client.get(transactions_url())

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        entry = response.data['results'][0]
        assert entry['item_name'] == 'Coffee for two'
        assert entry['redemption_code'] == voucher.redemption_code
        assert response.data['summary']['purchase']['count'] == 1
        assert response.data['summary']['redemption']['count'] == 1

    def test_filter_by_type(self, cafe_client, make_voucher, make_entry):
        voucher = make_voucher(status=VoucherStatus.REDEEMED)
        make_entry(voucher)
        make_entry(voucher, entry_type=TransactionType.REDEMPTION)

        response = cafe_client.get(transactions_url(), {'type': 'redemption'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['type'] == 'redemption'
        # Totals always cover every type
        assert response.data['summary']['purchase']['count'] == 1

    def test_unknown_type_rejected(self, cafe_client):
        response = cafe_client.get(transactions_url(), {'type': 'payout'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_limit_pages_results(self, cafe_client, make_voucher, make_entry):
        for _ in range(3):
            make_entry(make_voucher())

        response = cafe_client.get(transactions_url(), {'limit': 2})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 3
        assert len(response.data['results']) == 2
        assert response.data['next'] is not None
