"""Role gates for the marketplace API.

These only check the caller's role.  Ownership (which boutique, which
order) is decided by the services, which know the aggregate.
"""

from __future__ import annotations

from rest_framework.permissions import BasePermission

from modules.core.identity import Role


class HasRole(BasePermission):
    allowed_roles: frozenset[str] = frozenset()
    message = "Your role does not allow this operation."

    def has_permission(self, request, view) -> bool:
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and getattr(user, "role", None) in self.allowed_roles
        )


class IsShopper(HasRole):
    allowed_roles = frozenset({Role.SHOPPER})


class IsVendor(HasRole):
    allowed_roles = frozenset({Role.VENDOR})


class IsMallAdmin(HasRole):
    allowed_roles = frozenset({Role.ADMIN})


class IsVendorOrAdmin(HasRole):
    allowed_roles = frozenset({Role.VENDOR, Role.ADMIN})
