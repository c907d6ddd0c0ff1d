import re

import pytest
from decimal import Decimal
from unittest.mock import patch
from django.urls import reverse
from rest_framework import status
from apps.merchants.models import Merchant, MerchantStatus, GiftItem


# =============================================================================
# Approval Tests
# =============================================================================

@pytest.mark.django_db
class TestMerchantApproval:
    """Tests for POST /api/admin/merchants/{id}/approve/ and deny/"""

    def test_approve_sends_temp_password(self, admin_client, api_client, pending_merchant, mailoutbox):
        url = reverse('merchants:admin-merchant-approve', args=[pending_merchant.id])
        response = admin_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'approved'
        assert response.data['emailSent'] is True

        pending_merchant.refresh_from_db()
        assert pending_merchant.is_active

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ['hello@newgrind.ie']
        temp_password = re.search(r'Temporary password: (\S+)', mailoutbox[0].body).group(1)
        assert pending_merchant.temp_password != temp_password
        assert pending_merchant.check_temp_password(temp_password)

        login = api_client.post(reverse('merchants:cafe-login'), {
            'email': 'hello@newgrind.ie',
            'password': temp_password,
        })
        assert login.data['requiresPasswordChange'] is True

    def test_approve_survives_email_failure(self, admin_client, pending_merchant):
        with patch('apps.merchants.emails.send_mail', side_effect=ConnectionError('smtp down')):
            response = admin_client.post(
                reverse('merchants:admin-merchant-approve', args=[pending_merchant.id])
            )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['emailSent'] is False
        pending_merchant.refresh_from_db()
        assert pending_merchant.status == MerchantStatus.APPROVED

    def test_approve_twice_rejected(self, admin_client, merchant):
        url = reverse('merchants:admin-merchant-approve', args=[merchant.id])
        response = admin_client.post(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'invalid_merchant_transition'

    def test_deny(self, admin_client, pending_merchant, mailoutbox):
        url = reverse('merchants:admin-merchant-deny', args=[pending_merchant.id])
        response = admin_client.post(url, {'reason': 'Outside service area'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'denied'
        assert 'Outside service area' in mailoutbox[0].body

    def test_non_staff_forbidden(self, cafe_client, pending_merchant):
        url = reverse('merchants:admin-merchant-approve', args=[pending_merchant.id])
        response = cafe_client.post(url)

        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
        pending_merchant.refresh_from_db()
        assert pending_merchant.status == MerchantStatus.PENDING

    def test_unknown_merchant(self, admin_client, db):
        url = reverse('merchants:admin-merchant-approve', args=['00000000-0000-0000-0000-000000000000'])
        response = admin_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Merchant CRUD Tests
# =============================================================================

@pytest.mark.django_db
class TestAdminMerchants:
    """Tests for /api/admin/merchants/"""

    def test_list_filter_by_status(self, admin_client, merchant, pending_merchant):
        url = reverse('merchants:admin-merchant-list')
        response = admin_client.get(url, {'status': 'pending'})

        assert response.status_code == status.HTTP_200_OK
        ids = [m['id'] for m in response.data]
        assert ids == [str(pending_merchant.id)]

    def test_credentials_never_exposed(self, admin_client, merchant):
        url = reverse('merchants:admin-merchant-detail', args=[merchant.id])
        response = admin_client.get(url)

        assert 'password' not in response.data
        assert 'temp_password' not in response.data

    def test_create_merchant_starts_pending(self, admin_client, db):
        url = reverse('merchants:admin-merchant-list')
        response = admin_client.post(url, {
            'name': 'Fresh Cafe',
            'contact_email': 'fresh@cafe.ie',
            'status': 'approved',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert Merchant.objects.get(contact_email='fresh@cafe.ie').status == MerchantStatus.PENDING


# =============================================================================
# Brontie Fee Tests
# =============================================================================

@pytest.mark.django_db
class TestBrontieFee:
    """Tests for POST /api/admin/merchants/{id}/brontie-fee/"""

    def test_activate_with_rate(self, admin_client, merchant):
        url = reverse('merchants:admin-merchant-brontie-fee', args=[merchant.id])
        response = admin_client.post(url, {'isActive': True, 'commissionRate': '0.150'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        merchant.refresh_from_db()
        assert merchant.brontie_fee_active
        assert merchant.commission_rate == Decimal('0.150')
        assert merchant.brontie_fee_activated_at is not None
        assert merchant.effective_commission_rate == Decimal('0.150')

    def test_deactivate_stores_reason(self, admin_client, merchant):
        merchant.brontie_fee_active = True
        merchant.save()

        url = reverse('merchants:admin-merchant-brontie-fee', args=[merchant.id])
        response = admin_client.post(url, {'isActive': False, 'reason': 'Launch promo'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        merchant.refresh_from_db()
        assert not merchant.brontie_fee_active
        assert merchant.brontie_fee_deactivation_reason == 'Launch promo'
        assert merchant.effective_commission_rate == Decimal('0')

    def test_rate_out_of_range(self, admin_client, merchant):
        url = reverse('merchants:admin-merchant-brontie-fee', args=[merchant.id])
        response = admin_client.post(url, {'isActive': True, 'commissionRate': '1.5'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_zero_rate_is_not_active(self, merchant):
        merchant.brontie_fee_active = True
        merchant.commission_rate = Decimal('0')

        assert not merchant.brontie_fee_is_active


# =============================================================================
# Catalog Admin Tests
# =============================================================================

@pytest.mark.django_db
class TestAdminCatalog:
    """Tests for admin categories, locations and gift items."""

    def test_create_category_fills_slug(self, admin_client):
        url = reverse('merchants:admin-category-list')
        response = admin_client.post(url, {'name': 'Hot Drinks'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['slug'] == 'hot-drinks'

    def test_create_location(self, admin_client, merchant):
        url = reverse('merchants:admin-location-list')
        response = admin_client.post(url, {
            'merchant': str(merchant.id),
            'name': 'Harbour',
            'address': '5 Quay',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert merchant.locations.filter(name='Harbour').exists()

    def test_create_gift_item_for_merchant(self, admin_client, merchant, category, location):
        url = reverse('merchants:admin-gift-item-list')
        response = admin_client.post(url, {
            'merchant': str(merchant.id),
            'category': str(category.id),
            'name': 'Latte',
            'price': '3.80',
            'locations': [str(location.id)],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        item = GiftItem.objects.get(name='Latte')
        assert list(item.locations.all()) == [location]
