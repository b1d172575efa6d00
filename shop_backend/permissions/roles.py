# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_MANAGE_PRODUCTS = "products.manage"
CAP_MANAGE_USERS = "users.manage"
CAP_MANAGE_ORDERS = "orders.manage"

ALL_CAPABILITIES = {
    CAP_MANAGE_PRODUCTS,
    CAP_MANAGE_USERS,
    CAP_MANAGE_ORDERS,
}


# =========================================================
# ROLE → CAPABILITY MAP (DEFAULT)
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_CUSTOMER: set(),
}


# =========================================================
# PER-USER FLAGS
# =========================================================
# An admin keeps a capability only while the matching flag on the
# user row is set. Flags can narrow, never widen.
CAPABILITY_FLAGS: dict[str, str] = {
    CAP_MANAGE_PRODUCTS: "can_manage_products",
    CAP_MANAGE_USERS: "can_manage_users",
    CAP_MANAGE_ORDERS: "can_manage_orders",
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def effective_capabilities_for(user) -> set[str]:
    """
    Capabilities from role, then narrowed by the per-user flags.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return set()

    if not getattr(user, "is_active", True):
        return set()

    role = get_user_role(user)
    caps = set(ROLE_CAPABILITIES.get(role, set()))

    return {cap for cap in caps if getattr(user, CAPABILITY_FLAGS.get(cap, ""), True)}


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        required_capability = CAP_MANAGE_ORDERS
    """

    message = "Access denied. You do not have permission to perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default
            return False

        return required in effective_capabilities_for(user)

