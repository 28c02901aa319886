"""
Tests for admin login, bearer token authentication and permissions.
"""
import pytest
from django.core import signing
from rest_framework import status
from rest_framework.test import APIClient

from apps.core.services_auth import AdminAuthService
from apps.members.tests.factories import AdminUserFactory, SuperuserFactory, UserFactory


@pytest.fixture
def api_client():
    """Return an API client."""
    return APIClient()


@pytest.mark.django_db
class TestAdminAuthService:
    """Tests for AdminAuthService."""

    def test_login_returns_token_and_profile(self):
        """Staff users receive a token that resolves back to them."""
        user = AdminUserFactory(username='organiser')
        payload = AdminAuthService.login('organiser', 'testpass123')

        assert payload['username'] == 'organiser'
        assert payload['is_superuser'] is False
        assert AdminAuthService.user_for_token(payload['token']) == user

    def test_login_sets_last_login(self):
        user = AdminUserFactory(username='organiser')
        AdminAuthService.login('organiser', 'testpass123')
        user.refresh_from_db()
        assert user.last_login is not None

    def test_wrong_password(self):
        AdminUserFactory(username='organiser')
        with pytest.raises(ValueError):
            AdminAuthService.login('organiser', 'wrong')

    def test_non_staff_rejected(self):
        """Regular accounts cannot obtain an admin token."""
        UserFactory(username='member')
        with pytest.raises(ValueError):
            AdminAuthService.login('member', 'testpass123')

    def test_tampered_token(self):
        user = AdminUserFactory()
        token = AdminAuthService.issue_token(user)
        with pytest.raises(signing.BadSignature):
            AdminAuthService.user_for_token(token + 'x')


@pytest.mark.django_db
class TestAdminLoginView:
    """Tests for the login endpoint and bearer authentication."""

    url = '/api/v1/auth/login/'

    def test_login_success(self, api_client):
        AdminUserFactory(username='organiser')
        response = api_client.post(self.url, {'username': 'organiser', 'password': 'testpass123'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['token']

    def test_login_failure(self, api_client):
        response = api_client.post(self.url, {'username': 'nobody', 'password': 'x'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error'] == 'Invalid username or password'

    def test_login_requires_fields(self, api_client):
        response = api_client.post(self.url, {'username': 'organiser'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_bearer_token_grants_admin_access(self, api_client):
        """A token from the login endpoint opens admin-only endpoints."""
        AdminUserFactory(username='organiser')
        token = api_client.post(
            self.url, {'username': 'organiser', 'password': 'testpass123'}
        ).data['token']

        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = api_client.get('/api/v1/events/')

        assert response.status_code == status.HTTP_200_OK

    def test_invalid_bearer_token(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')
        response = api_client.get('/api/v1/events/')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_inactive_user_token_rejected(self, api_client):
        user = AdminUserFactory()
        token = AdminAuthService.issue_token(user)
        user.is_active = False
        user.save()

        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        response = api_client.get('/api/v1/events/')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestPermissions:
    """Admin-only endpoints reject anonymous and non-staff users."""

    def test_anonymous_denied(self, api_client):
        response = api_client.get('/api/v1/events/')
        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_non_staff_forbidden(self, api_client):
        api_client.force_authenticate(user=UserFactory())
        response = api_client.get('/api/v1/events/')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_superuser_allowed(self, api_client):
        api_client.force_authenticate(user=SuperuserFactory())
        response = api_client.get('/api/v1/events/')
        assert response.status_code == status.HTTP_200_OK
