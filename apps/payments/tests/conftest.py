import hashlib
import hmac
import json
import time
import uuid

import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework.test import APIClient
from apps.merchants.models import Category, Merchant, MerchantLocation, GiftItem, MerchantStatus
from apps.vouchers.models import Voucher, VoucherStatus


TEST_WEBHOOK_SECRET = 'whsec_test_secret'


def sign_payload(payload: str, secret: str = TEST_WEBHOOK_SECRET, timestamp=None) -> str:
    """Build a stripe-signature header the way Stripe does."""
    timestamp = int(timestamp or time.time())
    signed = f'{timestamp}.{payload}'.encode('utf-8')
    signature = hmac.new(secret.encode('utf-8'), signed, hashlib.sha256).hexdigest()
    return f't={timestamp},v1={signature}'


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def merchant(db):
    """Create and return an approved merchant connected to Stripe."""
    return Merchant.objects.create(
        name='Bean There',
        contact_email='owner@beanthere.ie',
        status=MerchantStatus.APPROVED,
        is_active=True,
        stripe_account_id='acct_beanthere',
    )


@pytest.fixture
def location(merchant):
    """Create and return an active location of ``merchant``."""
    return MerchantLocation.objects.create(
        merchant=merchant,
        name='Grafton Street',
        address='1 Grafton Street',
    )


@pytest.fixture
def gift_item(merchant, location):
    """Create and return a 10 EUR gift item redeemable at ``location``."""
    category = Category.objects.create(name='Coffee')
    item = GiftItem.objects.create(
        merchant=merchant,
        category=category,
        name='Coffee for two',
        price=Decimal('10.00'),
    )
    item.locations.set([location])
    return item


@pytest.fixture
def make_voucher(gift_item):
    """Return a factory creating vouchers for ``gift_item``."""
    def _make(status=VoucherStatus.UNREDEEMED, amount=Decimal('10.00'), **kwargs):
        kwargs.setdefault('payment_intent_id', f'pi_{uuid.uuid4().hex[:24]}')
        voucher = Voucher.objects.create(
            gift_item=gift_item,
            status=status,
            amount=amount,
            **kwargs
        )
        voucher.valid_locations.set(gift_item.locations.all())
        return voucher
    return _make


@pytest.fixture
def checkout_session(gift_item):
    """Return a factory for completed Checkout Session objects."""
    def _make(payment_intent='pi_checkout_1', **metadata):
        base_metadata = {
            'giftItemId': str(gift_item.id),
            'merchantId': str(gift_item.merchant_id),
            'senderName': 'Aoife',
            'recipientName': 'Cian',
            'productSku': 'GIFT-TEST',
            'recipientToken': f'rt_{uuid.uuid4().hex[:12]}',
        }
        base_metadata.update(metadata)
        return {
            'id': 'cs_test_1',
            'object': 'checkout.session',
            'payment_intent': payment_intent,
            'payment_status': 'paid',
            'amount_total': 1000,
            'customer_details': {'email': 'aoife@example.com'},
            'metadata': {key: value for key, value in base_metadata.items() if value is not None},
        }
    return _make


@pytest.fixture
def post_event(api_client):
    """Return a helper posting a signed Stripe event to the webhook."""
    def _post(event_type, obj, secret=TEST_WEBHOOK_SECRET, signature=None):
        payload = json.dumps({
            'id': f'evt_{uuid.uuid4().hex[:16]}',
            'object': 'event',
            'type': event_type,
            'data': {'object': obj},
        })
        if signature is None:
            signature = sign_payload(payload, secret)
        return api_client.post(
            reverse('payments:stripe-webhook'),
            data=payload,
            content_type='application/json',
            HTTP_STRIPE_SIGNATURE=signature,
        )
    return _post
