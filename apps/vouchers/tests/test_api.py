import uuid

import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.vouchers.models import PayoutItem, PayoutStatus, VoucherStatus


@pytest.fixture
def payout_item(make_voucher, merchant):
    """Create and return a pending payout item."""
    voucher = make_voucher(status=VoucherStatus.REDEEMED)
    return PayoutItem.objects.create(
        voucher=voucher,
        merchant=merchant,
        amount_payable=Decimal('9.61'),
        brontie_fee=Decimal('0.00'),
        stripe_fee=Decimal('0.39'),
    )


# =============================================================================
# Voucher Detail
# =============================================================================

@pytest.mark.django_db
class TestVoucherDetail:
    """Tests for GET /api/voucher/{code}/"""

    def test_get_voucher(self, api_client, voucher, location):
        response = api_client.get(reverse('vouchers:voucher-detail', args=[voucher.redemption_code]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'unredeemed'
        assert response.data['gift_item']['name'] == 'Coffee for two'
        assert response.data['gift_item']['merchant']['name'] == 'Bean There'
        assert response.data['gift_item']['category']['slug'] == 'coffee'
        assert response.data['valid_locations'][0]['id'] == str(location.id)

    def test_unknown_voucher(self, api_client, db):
        response = api_client.get(reverse('vouchers:voucher-detail', args=['nope']))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'voucher_not_found'


# =============================================================================
# Payouts
# =============================================================================

@pytest.mark.django_db
class TestPayouts:
    """Tests for /api/admin/payouts/"""

    def test_list_pending(self, admin_client, payout_item):
        response = admin_client.get(reverse('vouchers:admin-payout-list'), {'status': 'pending'})

        assert response.status_code == status.HTTP_200_OK
        assert [p['id'] for p in response.data] == [str(payout_item.id)]
        assert response.data[0]['merchant_name'] == 'Bean There'

    def test_mark_paid(self, admin_client, payout_item):
        response = admin_client.post(reverse('vouchers:admin-payout-mark-paid'), {
            'payoutItemIds': [str(payout_item.id)],
            'transferId': 'tr_123',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['updated'] == 1
        payout_item.refresh_from_db()
        assert payout_item.status == PayoutStatus.PAID
        assert payout_item.paid_out_at is not None
        assert payout_item.transfer_id == 'tr_123'

    def test_mark_paid_twice_is_safe(self, admin_client, payout_item):
        url = reverse('vouchers:admin-payout-mark-paid')
        admin_client.post(url, {'payoutItemIds': [str(payout_item.id)]}, format='json')
        response = admin_client.post(url, {'payoutItemIds': [str(payout_item.id)]}, format='json')

        assert response.data['updated'] == 0

    def test_mark_paid_unknown_ids(self, admin_client, db):
        response = admin_client.post(reverse('vouchers:admin-payout-mark-paid'), {
            'payoutItemIds': [str(uuid.uuid4())],
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_requires_staff(self, api_client, payout_item):
        response = api_client.get(reverse('vouchers:admin-payout-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_transactions_read_only(self, admin_client, voucher):
        response = admin_client.post(reverse('vouchers:admin-transaction-list'), {}, format='json')

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
