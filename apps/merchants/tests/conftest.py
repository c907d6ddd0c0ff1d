import pytest
from decimal import Decimal
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.merchants.authentication import get_cafe_token_service
from apps.merchants.models import (
    Category,
    Merchant,
    MerchantLocation,
    GiftItem,
    MerchantStatus,
)


@pytest.fixture(autouse=True)
def clear_throttle_cache():
    """Reset rate limit counters between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def staff_user(db):
    """Create and return a back-office user."""
    return User.objects.create_user(
        email='staff@brontie.ie',
        password='StaffPass123!',
        is_staff=True,
    )


@pytest.fixture
def admin_client(staff_user):
    """Return an API client authenticated as staff using JWT."""
    client = APIClient()
    refresh = RefreshToken.for_user(staff_user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def category(db):
    """Create and return an active category."""
    return Category.objects.create(name='Coffee', display_order=1)


@pytest.fixture
def merchant(db):
    """Create and return an approved merchant with a portal password."""
    merchant = Merchant.objects.create(
        name='Bean There',
        contact_email='owner@beanthere.ie',
        county='Dublin',
        status=MerchantStatus.APPROVED,
        is_active=True,
    )
    merchant.set_password('CafePass123!')
    merchant.save()
    return merchant


@pytest.fixture
def pending_merchant(db):
    """Create and return a merchant awaiting approval."""
    return Merchant.objects.create(
        name='New Grind',
        contact_email='hello@newgrind.ie',
        county='Cork',
    )


@pytest.fixture
def location(merchant):
    """Create and return an active location of ``merchant``."""
    return MerchantLocation.objects.create(
        merchant=merchant,
        name='Grafton Street',
        address='1 Grafton Street',
        city='Dublin',
    )


@pytest.fixture
def other_location(db):
    """Create and return a location owned by a different merchant."""
    other = Merchant.objects.create(
        name='Other Cafe',
        contact_email='other@cafe.ie',
        status=MerchantStatus.APPROVED,
        is_active=True,
    )
    return MerchantLocation.objects.create(
        merchant=other,
        name='Other Street',
        address='2 Other Street',
    )


@pytest.fixture
def gift_item(merchant, category, location):
    """Create and return an active gift item redeemable at ``location``."""
    item = GiftItem.objects.create(
        merchant=merchant,
        category=category,
        name='Flat White',
        description='A smooth flat white',
        price=Decimal('4.50'),
    )
    item.locations.set([location])
    return item


@pytest.fixture
def cafe_client(merchant):
    """Return an API client carrying a café session cookie."""
    client = APIClient()
    service = get_cafe_token_service()
    client.cookies[service.config.cookie_name] = service.issue(merchant)
    return client
