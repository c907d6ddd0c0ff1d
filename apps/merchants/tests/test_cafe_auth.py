import pytest
from django.urls import reverse
from rest_framework import status
from apps.merchants.authentication import get_cafe_token_service
from apps.merchants.models import Merchant


COOKIE_NAME = 'cafe-token'


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestCafeLogin:
    """Tests for POST /api/cafes/login/"""

    def test_login_success_sets_cookie(self, api_client, merchant):
        url = reverse('merchants:cafe-login')
        response = api_client.post(url, {
            'email': 'owner@beanthere.ie',
            'password': 'CafePass123!',
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] is True
        assert response.data['merchant']['id'] == str(merchant.id)

        cookie = response.cookies[COOKIE_NAME]
        assert cookie['httponly']
        claims = get_cafe_token_service().decode(cookie.value)
        assert claims['merchant_id'] == str(merchant.id)
        assert claims['email'] == merchant.contact_email

    def test_login_email_case_insensitive(self, api_client, merchant):
        url = reverse('merchants:cafe-login')
        response = api_client.post(url, {
            'email': 'OWNER@BeanThere.ie',
            'password': 'CafePass123!',
        })

        assert response.status_code == status.HTTP_200_OK

    def test_login_wrong_password(self, api_client, merchant):
        url = reverse('merchants:cafe-login')
        response = api_client.post(url, {
            'email': 'owner@beanthere.ie',
            'password': 'nope',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'invalid_credentials'
        assert COOKIE_NAME not in response.cookies

    def test_login_pending_merchant_rejected(self, api_client, pending_merchant):
        pending_merchant.set_password('CafePass123!')
        pending_merchant.save()

        url = reverse('merchants:cafe-login')
        response = api_client.post(url, {
            'email': 'hello@newgrind.ie',
            'password': 'CafePass123!',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_with_temp_password_requires_change(self, api_client, merchant):
        """Temporary password never opens a session."""
        merchant.password = ''
        merchant.set_temp_password('TempPass1')
        merchant.save()

        url = reverse('merchants:cafe-login')
        response = api_client.post(url, {
            'email': 'owner@beanthere.ie',
            'password': 'TempPass1',
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['requiresPasswordChange'] is True
        assert COOKIE_NAME not in response.cookies


# =============================================================================
# Password Change Tests
# =============================================================================

@pytest.mark.django_db
class TestCafeChangePassword:
    """Tests for POST /api/cafes/change-password/"""

    def test_change_from_temp_password(self, api_client, merchant):
        merchant.password = ''
        merchant.set_temp_password('TempPass1')
        merchant.save()

        url = reverse('merchants:cafe-change-password')
        response = api_client.post(url, {
            'email': 'owner@beanthere.ie',
            'currentPassword': 'TempPass1',
            'newPassword': 'BrandNew123!',
        })

        assert response.status_code == status.HTTP_200_OK
        merchant.refresh_from_db()
        assert merchant.check_password('BrandNew123!')
        assert merchant.temp_password == ''

        login = api_client.post(reverse('merchants:cafe-login'), {
            'email': 'owner@beanthere.ie',
            'password': 'BrandNew123!',
        })
        assert login.data['success'] is True

    def test_change_wrong_current_password(self, api_client, merchant):
        url = reverse('merchants:cafe-change-password')
        response = api_client.post(url, {
            'email': 'owner@beanthere.ie',
            'currentPassword': 'wrong',
            'newPassword': 'BrandNew123!',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        merchant.refresh_from_db()
        assert merchant.check_password('CafePass123!')

    def test_change_unknown_merchant(self, api_client, db):
        url = reverse('merchants:cafe-change-password')
        response = api_client.post(url, {
            'email': 'ghost@cafe.ie',
            'currentPassword': 'whatever',
            'newPassword': 'BrandNew123!',
        })

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['code'] == 'merchant_not_found'

    def test_new_password_too_short(self, api_client, merchant):
        url = reverse('merchants:cafe-change-password')
        response = api_client.post(url, {
            'email': 'owner@beanthere.ie',
            'currentPassword': 'CafePass123!',
            'newPassword': 'short',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Session Tests
# =============================================================================

@pytest.mark.django_db
class TestCafeSession:
    """Tests for cookie authentication on café endpoints."""

    def test_profile_with_cookie(self, cafe_client, merchant):
        response = cafe_client.get(reverse('merchants:cafe-profile'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(merchant.id)
        assert 'password' not in response.data
        assert 'temp_password' not in response.data

    def test_profile_without_cookie(self, api_client):
        response = api_client.get(reverse('merchants:cafe-profile'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_profile_with_garbage_cookie(self, api_client, db):
        api_client.cookies[COOKIE_NAME] = 'not-a-jwt'
        response = api_client.get(reverse('merchants:cafe-profile'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'invalid_token'

    def test_token_for_deleted_merchant(self, cafe_client, merchant):
        Merchant.objects.filter(id=merchant.id).delete()
        response = cafe_client.get(reverse('merchants:cafe-profile'))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_staff_jwt_is_not_a_cafe_session(self, admin_client):
        response = admin_client.get(reverse('merchants:cafe-profile'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_profile(self, cafe_client, merchant):
        response = cafe_client.patch(reverse('merchants:cafe-profile'), {
            'description': 'Best beans in town',
            'iban': 'IE29AIBK93115212345678',
            'status': 'denied',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        merchant.refresh_from_db()
        assert merchant.description == 'Best beans in town'
        assert merchant.iban == 'IE29AIBK93115212345678'
        assert merchant.status == 'approved'

    def test_logout_clears_cookie(self, cafe_client):
        response = cafe_client.post(reverse('merchants:cafe-logout'))

        assert response.status_code == status.HTTP_200_OK
        assert response.cookies[COOKIE_NAME].value == ''
