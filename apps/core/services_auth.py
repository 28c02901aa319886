"""Administrator login issuing signed bearer tokens."""
import logging

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.core import signing
from django.utils import timezone

logger = logging.getLogger(__name__)

TOKEN_SALT = 'apps.core.admin-token'


class AdminAuthService:
    """
    Checks administrator credentials and issues time-limited tokens.

    Tokens are Django TimestampSigner signatures of the user's primary key, so
    they can be verified without any server-side session storage.
    """

    @staticmethod
    def _signer():
        return signing.TimestampSigner(salt=TOKEN_SALT)

    @classmethod
    def issue_token(cls, user):
        return cls._signer().sign(str(user.pk))

    @classmethod
    def login(cls, username, password):
        """
        Returns a dict with the token and admin profile.

        Raises:
            ValueError: wrong credentials or not a staff account.
        """
        user = authenticate(username=username, password=password)
        if user is None or not user.is_staff:
            logger.error("Invalid credentials for admin user: %s", username)
            raise ValueError('Invalid username or password')

        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])
        logger.info("Admin %s logged in", username)

        return {
            'token': cls.issue_token(user),
            'id': user.pk,
            'username': user.get_username(),
            'name': user.get_full_name() or user.get_username(),
            'email': user.email,
            'is_superuser': user.is_superuser,
        }

    @classmethod
    def user_for_token(cls, token):
        """
        Resolve a token back to its active user.

        Raises:
            signing.BadSignature / signing.SignatureExpired on invalid tokens.
            User.DoesNotExist when the user is gone or inactive.
        """
        max_age = getattr(settings, 'ADMIN_TOKEN_MAX_AGE', 60 * 60 * 24)
        user_pk = cls._signer().unsign(token, max_age=max_age)
        return get_user_model().objects.get(pk=user_pk, is_active=True)
