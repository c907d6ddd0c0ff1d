import uuid

import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.merchants.authentication import get_cafe_token_service
from apps.merchants.models import Category, Merchant, MerchantLocation, GiftItem, MerchantStatus
from apps.vouchers.models import Voucher, VoucherStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


# =============================================================================
# Merchants
# =============================================================================

@pytest.fixture
def merchant(db):
    """Create and return an approved merchant without the Brontie fee."""
    return Merchant.objects.create(
        name='Bean There',
        contact_email='owner@beanthere.ie',
        status=MerchantStatus.APPROVED,
        is_active=True,
        account_holder_name='Bean There Ltd',
        iban='IE29AIBK93115212345678',
        bic='AIBKIE2D',
        stripe_is_connected=True,
        stripe_charges_enabled=True,
    )


@pytest.fixture
def other_merchant(db):
    """Create and return a second approved merchant."""
    return Merchant.objects.create(
        name='Harbour Roast',
        contact_email='hello@harbourroast.ie',
        status=MerchantStatus.APPROVED,
        is_active=True,
    )


@pytest.fixture
def cafe_client(merchant):
    """Return an API client carrying ``merchant``'s café session cookie."""
    client = APIClient()
    service = get_cafe_token_service()
    client.cookies[service.config.cookie_name] = service.issue(merchant)
    return client


@pytest.fixture
def staff_client(db):
    """Return an API client authenticated as staff using JWT."""
    staff = User.objects.create_user(email='staff@brontie.ie', password='StaffPass123!', is_staff=True)
    client = APIClient()
    refresh = RefreshToken.for_user(staff)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


# =============================================================================
# Catalog
# =============================================================================

@pytest.fixture
def location(merchant):
    """Create and return an active location of ``merchant``."""
    return MerchantLocation.objects.create(
        merchant=merchant,
        name='Grafton Street',
        address='1 Grafton Street',
    )


@pytest.fixture
def category(db):
    """Create and return the Coffee category."""
    return Category.objects.create(name='Coffee')


@pytest.fixture
def gift_item(merchant, location, category):
    """Create and return a 10 EUR gift item redeemable at ``location``."""
    item = GiftItem.objects.create(
        merchant=merchant,
        category=category,
        name='Coffee for two',
        price=Decimal('10.00'),
    )
    item.locations.set([location])
    return item


@pytest.fixture
def other_gift_item(other_merchant, category):
    """Create and return a gift item of ``other_merchant``."""
    return GiftItem.objects.create(
        merchant=other_merchant,
        category=category,
        name='Harbour Latte',
        price=Decimal('4.50'),
    )


@pytest.fixture
def make_voucher(gift_item):
    """Return a factory creating vouchers, by default for ``gift_item``."""
    def _make(status=VoucherStatus.UNREDEEMED, item=None, created_at=None, **kwargs):
        item = item or gift_item
        kwargs.setdefault('payment_intent_id', f'pi_{uuid.uuid4().hex[:24]}')
        kwargs.setdefault('amount', item.price)
        voucher = Voucher.objects.create(gift_item=item, status=status, **kwargs)
        voucher.valid_locations.set(item.locations.all())
        if created_at is not None:
            Voucher.objects.filter(id=voucher.id).update(created_at=created_at)
            voucher.refresh_from_db()
        return voucher
    return _make
