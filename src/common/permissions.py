from django.http import HttpRequest
from ninja_extra import ControllerBase
from ninja_extra.permissions import BasePermission

REDEEM_PERMISSION = "entitlements.redeem_entitlements"


class IsOperator(BasePermission):
    """Allow POS operators: users holding the redeem permission, and superusers."""

    message = "You are not allowed to operate a POS terminal."

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """Check the redeem permission on the authenticated user."""
        user = request.user
        if not user or not user.is_authenticated or not user.is_active:
            return False
        return bool(user.is_superuser or user.has_perm(REDEEM_PERMISSION))
