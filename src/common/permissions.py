from django.http import HttpRequest
from ninja_extra import ControllerBase
from ninja_extra.permissions import BasePermission

from accounts.service import claims_service


class RootPermission(BasePermission):
    def __init__(self, action: str) -> None:
        """Store the action."""
        self.action = action

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """Must implement abstract method. This is due to an error in Ninja Extra.

        This Method will be ignored, only has_object_permission will be called.
        """
        return True


class IsSuperAdmin(BasePermission):
    message = "Only super admins can perform this action."

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """The caller's claims carry the super admin flag."""
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return claims_service.get_claims(user).super_admin
