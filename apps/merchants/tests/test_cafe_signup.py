import pytest
from decimal import Decimal
from unittest.mock import patch
from django.urls import reverse
from rest_framework import status
from apps.merchants.models import Merchant, MerchantStatus, GiftItem


@pytest.fixture
def signup_payload(category):
    """Return a valid café application."""
    return {
        'merchant': {
            'name': 'Little Bird',
            'address': '3 Main Street',
            'county': 'Galway',
            'businessEmail': 'Hello@LittleBird.ie',
            'businessCategory': 'Café & Treats',
            'description': 'Coffee and cake by the bay',
            'contactPhone': '091 555 0101',
            'website': 'https://littlebird.ie',
        },
        'giftItems': [
            {'name': 'Cappuccino', 'categoryId': str(category.id), 'price': '3.80'},
            {
                'name': 'Coffee & Cake',
                'categoryId': str(category.id),
                'price': '7.50',
                'description': 'Any coffee with a slice of cake',
            },
        ],
    }


# =============================================================================
# Café Signup
# =============================================================================

@pytest.mark.django_db
class TestCafeSignup:
    """Tests for POST /api/cafes/signup/"""

    def test_signup_creates_pending_merchant(self, api_client, signup_payload):
        url = reverse('merchants:cafe-signup')
        response = api_client.post(url, signup_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['success'] is True

        merchant = Merchant.objects.get(id=response.data['merchantId'])
        assert merchant.status == MerchantStatus.PENDING
        assert merchant.is_active is False
        assert merchant.brontie_fee_active is False
        assert merchant.contact_email == 'hello@littlebird.ie'
        assert merchant.has_usable_password() is False

    def test_signup_creates_inactive_gift_items(self, api_client, signup_payload):
        url = reverse('merchants:cafe-signup')
        response = api_client.post(url, signup_payload, format='json')

        items = GiftItem.objects.filter(merchant_id=response.data['merchantId'])
        assert items.count() == 2
        assert not items.filter(is_active=True).exists()
        assert items.get(name='Cappuccino').price == Decimal('3.80')
        assert items.get(name='Cappuccino').locations.count() == 0

    def test_signup_strips_html(self, api_client, signup_payload):
        signup_payload['merchant']['name'] = '<b>Little Bird</b>'

        url = reverse('merchants:cafe-signup')
        response = api_client.post(url, signup_payload, format='json')

        merchant = Merchant.objects.get(id=response.data['merchantId'])
        assert merchant.name == 'Little Bird'

    def test_signup_sends_emails(self, api_client, signup_payload, mailoutbox, settings):
        settings.ADMIN_NOTIFICATION_EMAIL = 'team@brontie.ie'

        url = reverse('merchants:cafe-signup')
        api_client.post(url, signup_payload, format='json')

        recipients = sorted(message.to[0] for message in mailoutbox)
        assert recipients == ['hello@littlebird.ie', 'team@brontie.ie']
        admin_email = next(m for m in mailoutbox if m.to == ['team@brontie.ie'])
        assert 'Cappuccino' in admin_email.body

    def test_email_failure_does_not_fail_signup(self, api_client, signup_payload):
        url = reverse('merchants:cafe-signup')
        with patch('apps.merchants.emails.send_mail', side_effect=ConnectionError('smtp down')):
            response = api_client.post(url, signup_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert Merchant.objects.filter(contact_email='hello@littlebird.ie').exists()

    def test_duplicate_email_rejected(self, api_client, signup_payload, merchant):
        signup_payload['merchant']['businessEmail'] = 'OWNER@beanthere.ie'

        url = reverse('merchants:cafe-signup')
        response = api_client.post(url, signup_payload, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['code'] == 'merchant_exists'

    def test_missing_merchant_fields(self, api_client, signup_payload):
        del signup_payload['merchant']['county']

        url = reverse('merchants:cafe-signup')
        response = api_client.post(url, signup_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'county' in response.data['merchant']
        assert Merchant.objects.count() == 0

    def test_description_too_long(self, api_client, signup_payload):
        signup_payload['merchant']['description'] = 'x' * 501

        url = reverse('merchants:cafe-signup')
        response = api_client.post(url, signup_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_gift_items_required(self, api_client, signup_payload):
        signup_payload['giftItems'] = []

        url = reverse('merchants:cafe-signup')
        response = api_client.post(url, signup_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'giftItems' in response.data

    def test_too_many_gift_items(self, api_client, signup_payload, category):
        signup_payload['giftItems'] = [
            {'name': f'Item {i}', 'categoryId': str(category.id), 'price': '3.00'}
            for i in range(16)
        ]

        url = reverse('merchants:cafe-signup')
        response = api_client.post(url, signup_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'giftItems' in response.data

    @pytest.mark.parametrize('price', ['0.40', '3.85'])
    def test_invalid_price_rejected(self, api_client, signup_payload, price):
        signup_payload['giftItems'][0]['price'] = price

        url = reverse('merchants:cafe-signup')
        response = api_client.post(url, signup_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Merchant.objects.count() == 0

    def test_unknown_category_rejected(self, api_client, signup_payload):
        signup_payload['giftItems'][0]['categoryId'] = '00000000-0000-0000-0000-000000000000'

        url = reverse('merchants:cafe-signup')
        response = api_client.post(url, signup_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_signup_rate_limited(self, api_client, signup_payload):
        url = reverse('merchants:cafe-signup')
        for i in range(3):
            signup_payload['merchant']['businessEmail'] = f'cafe{i}@example.ie'
            response = api_client.post(url, signup_payload, format='json')
            assert response.status_code == status.HTTP_201_CREATED

        signup_payload['merchant']['businessEmail'] = 'cafe3@example.ie'
        response = api_client.post(url, signup_payload, format='json')

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.data['code'] == 'throttled'

    def test_pending_merchant_cannot_log_in(self, api_client, signup_payload):
        api_client.post(reverse('merchants:cafe-signup'), signup_payload, format='json')

        response = api_client.post(reverse('merchants:cafe-login'), {
            'email': 'hello@littlebird.ie',
            'password': 'anything',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
