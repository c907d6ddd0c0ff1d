import uuid

import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.merchants.models import Category, Merchant, MerchantLocation, GiftItem, MerchantStatus
from apps.vouchers.models import Voucher, VoucherStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_client(db):
    """Return an API client authenticated as staff using JWT."""
    staff = User.objects.create_user(email='staff@brontie.ie', password='StaffPass123!', is_staff=True)
    client = APIClient()
    refresh = RefreshToken.for_user(staff)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def merchant(db):
    """Create and return an approved merchant without the Brontie fee."""
    return Merchant.objects.create(
        name='Bean There',
        contact_email='owner@beanthere.ie',
        status=MerchantStatus.APPROVED,
        is_active=True,
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
def other_location(merchant):
    """Create and return a second location the gift item is not valid at."""
    return MerchantLocation.objects.create(
        merchant=merchant,
        name='Harbour',
        address='5 Quay',
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
        kwargs.setdefault('sender_name', 'Aoife')
        kwargs.setdefault('recipient_name', 'Cian')
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
def voucher(make_voucher):
    """Create and return a paid, unredeemed voucher."""
    return make_voucher()
