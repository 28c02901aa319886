"""DRF authentication backed by AdminAuthService tokens."""
from django.contrib.auth import get_user_model
from django.core import signing
from rest_framework import authentication, exceptions

from .services_auth import AdminAuthService


class SignedTokenAuthentication(authentication.BaseAuthentication):
    """Reads `Authorization: Bearer <token>`."""

    keyword = 'Bearer'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None
        if len(header) != 2:
            raise exceptions.AuthenticationFailed('Invalid token header.')

        token = header[1].decode()
        try:
            user = AdminAuthService.user_for_token(token)
        except signing.SignatureExpired:
            raise exceptions.AuthenticationFailed('Token expired.')
        except signing.BadSignature:
            raise exceptions.AuthenticationFailed('Invalid token.')
        except get_user_model().DoesNotExist:
            raise exceptions.AuthenticationFailed('User inactive or deleted.')
        return user, token

    def authenticate_header(self, request):
        return self.keyword
