from strawberry.permission import BasePermission
from strawberry.types import Info


class IsAuthenticated(BasePermission):
    message = "Authentication required."

    def has_permission(self, source, info: Info, **kwargs):
        return bool(info.context.account)


class IsAuthorizedAdmin(BasePermission):
    message = "No autorizado para acceder al dashboard."

    def has_permission(self, source, info: Info, **kwargs):
        return bool(info.context.user)


ADMIN_PERMISSIONS = [IsAuthenticated, IsAuthorizedAdmin]
