"""allauth adapter for the staff-only admin sign in."""
from allauth.account.adapter import DefaultAccountAdapter


class StaffOnlyAccountAdapter(DefaultAccountAdapter):
    """Accounts are created by superusers in the Django admin, never by sign-up."""

    def is_open_for_signup(self, request):
        return False
