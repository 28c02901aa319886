"""DRF permission classes for admin and member-token access."""
from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """Requires an authenticated staff user."""
    message = "You must be an administrator to access this resource."

    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and (request.user.is_staff or request.user.is_superuser)
        )


class IsSuperuser(permissions.BasePermission):
    """Requires a superuser - used for corrective actions."""
    message = "Only a superuser can perform this action."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_superuser)


class HasMemberToken(permissions.BasePermission):
    """
    Self-service endpoints are authorised by the registration token in the URL
    or body; the token itself is checked by the service layer.
    """

    def has_permission(self, request, view):
        token = view.kwargs.get('token') or request.data.get('token')
        return bool(token)
