# users/tests/test_roles.py

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from rest_framework.test import APIRequestFactory

from permissions.roles import (
    CAP_MANAGE_ORDERS,
    CAP_MANAGE_PRODUCTS,
    CAP_MANAGE_USERS,
    HasCapability,
    effective_capabilities_for,
)

User = get_user_model()


class _View:
    def __init__(self, capability=None):
        self.required_capability = capability


class CapabilityTests(TestCase):
    """
    Tests for capability-based permissions.

    GUARANTEES:
    - Admin capabilities are narrowed by the per-user flags
    - Customers, inactive users and anonymous users hold nothing
    - Views without a declared capability deny by default
    """

    def setUp(self):
        self.factory = APIRequestFactory()

        self.admin = User.objects.create_admin(email="admin@example.com", password="pass")
        self.catalog_admin = User.objects.create_admin(
            email="catalog@example.com",
            password="pass",
            can_manage_orders=False,
            can_manage_users=False,
        )
        self.customer = User.objects.create_user(email="buyer@example.com", password="pass")

    # --------------------------------------------------
    # Helpers
    # --------------------------------------------------

    def _request_for(self, user=None):
        request = self.factory.get("/")
        request.user = user if user is not None else AnonymousUser()
        return request

    def test_full_admin_capabilities(self):
        self.assertEqual(
            effective_capabilities_for(self.admin),
            {CAP_MANAGE_PRODUCTS, CAP_MANAGE_ORDERS, CAP_MANAGE_USERS},
        )

    def test_flags_narrow_admin(self):
        self.assertEqual(effective_capabilities_for(self.catalog_admin), {CAP_MANAGE_PRODUCTS})

    def test_customer_has_nothing_even_with_flags(self):
        self.assertTrue(self.customer.can_manage_orders)
        self.assertEqual(effective_capabilities_for(self.customer), set())

    def test_inactive_admin_has_nothing(self):
        self.admin.is_active = False
        self.assertEqual(effective_capabilities_for(self.admin), set())

    def test_has_capability(self):
        perm = HasCapability()

        self.assertTrue(perm.has_permission(self._request_for(self.admin), _View(CAP_MANAGE_ORDERS)))
        self.assertFalse(perm.has_permission(self._request_for(self.catalog_admin), _View(CAP_MANAGE_ORDERS)))
        self.assertFalse(perm.has_permission(self._request_for(self.customer), _View(CAP_MANAGE_PRODUCTS)))
        self.assertFalse(perm.has_permission(self._request_for(None), _View(CAP_MANAGE_PRODUCTS)))

    def test_undeclared_capability_denies(self):
        self.assertFalse(HasCapability().has_permission(self._request_for(self.admin), _View()))

    def test_users_capability_follows_flag(self):
        perm = HasCapability()

        self.assertTrue(perm.has_permission(self._request_for(self.admin), _View(CAP_MANAGE_USERS)))
        self.assertFalse(perm.has_permission(self._request_for(self.catalog_admin), _View(CAP_MANAGE_USERS)))
