from rest_framework.permissions import SAFE_METHODS, BasePermission


class RolePermission(BasePermission):
    """
    Base permission class for role-based access control.
    Ensures user is authenticated and active.
    """
    allowed_roles = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        if not user.is_active:
            return False

        # Superusers always bypass role checks
        if user.is_superuser:
            return True

        return getattr(user, "role", None) in self.allowed_roles


class IsAdminOnly(RolePermission):
    message = "Admin access required."
    allowed_roles = {"ADMIN"}


class IsDonorOrAdmin(RolePermission):
    allowed_roles = {"ADMIN", "DONOR"}


class IsAdminOrReadOnly(IsAdminOnly):
    """
    Anyone may read; only admins may write.
    """

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return super().has_permission(request, view)
