import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User


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
        display_name='Staff User',
        is_staff=True,
    )


@pytest.fixture
def user(db):
    """Create and return a user without staff access."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        display_name='Test User',
    )


@pytest.fixture
def staff_inactive(db):
    """Create and return an inactive staff user."""
    return User.objects.create_user(
        email='inactive@brontie.ie',
        password='TestPass123!',
        is_staff=True,
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, staff_user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(staff_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
