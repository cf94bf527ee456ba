from rest_framework import permissions
from .models import User

class IsManagerOrHigher(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user.role in [
            User.Role.OWNER,
            User.Role.ADMIN,
            User.Role.MANAGER,
        ]


class CanApplyDiscounts(permissions.BasePermission):
    """
    Gate for discount endpoints. The discount service re-checks the same rule
    before touching any financial field.
    """

    message = "You do not have permission to apply discounts"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.can_apply_discounts)
