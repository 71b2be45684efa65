"""Permission class guarding the back-office API.

Authentication itself is delegated to Django auth and DRF's token/session
authenticators. This class only decides whether the authenticated identity
is a store administrator, using the ``ADMIN_EMAILS`` allowlist. An empty
allowlist admits any authenticated user (single-owner deployments).
"""

from django.conf import settings
from rest_framework.permissions import BasePermission


def is_admin_email(email: str | None) -> bool:
    if not email:
        return False
    allowlist = {e.lower() for e in getattr(settings, "ADMIN_EMAILS", [])}
    if not allowlist:
        return True
    return email.strip().lower() in allowlist


class IsStoreAdmin(BasePermission):
    message = "Access denied."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            # DRF turns this into NotAuthenticated (401)
            return False
        return is_admin_email(getattr(user, "email", None))
