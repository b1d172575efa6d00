# products/tests/test_permissions.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Product

User = get_user_model()

BASE = "/api/products/"


class ProductPermissionTests(TestCase):
    """
    Permission & access tests.

    GUARANTEES:
    - Anyone can browse available products
    - Hidden products are visible only to catalog managers
    - Writes need products.manage
    """

    def setUp(self):
        self.client = APIClient()

        self.admin = User.objects.create_admin(email="admin@example.com", password="pass12345")
        self.orders_only_admin = User.objects.create_admin(
            email="orders@example.com",
            password="pass12345",
            can_manage_products=False,
        )
        self.customer = User.objects.create_user(email="buyer@example.com", password="pass12345")

        self.product = Product.objects.create(name="Desk Lamp", category="home", price=Decimal("899.00"))
        self.hidden = Product.objects.create(
            name="Prototype Chair",
            category="home",
            price=Decimal("4999.00"),
            is_available=False,
        )

    def _names(self, res):
        return {p["name"] for p in res.data}

    def test_anonymous_can_browse_available_products(self):
        res = self.client.get(BASE)

        self.assertEqual(res.status_code, 200)
        self.assertEqual(self._names(res), {"Desk Lamp"})

    def test_anonymous_cannot_see_hidden_product(self):
        res = self.client.get(f"{BASE}{self.hidden.id}/")
        self.assertEqual(res.status_code, 404)

    def test_search_and_category_filter(self):
        Product.objects.create(name="Frying Pan", category="kitchen", price=Decimal("650.00"))

        self.assertEqual(self._names(self.client.get(BASE, {"q": "lamp"})), {"Desk Lamp"})
        self.assertEqual(self._names(self.client.get(BASE, {"category": "kitchen"})), {"Frying Pan"})

    def test_anonymous_user_cannot_create_product(self):
        res = self.client.post(BASE, {"name": "X", "price": "10.00"}, format="json")

        self.assertEqual(res.status_code, 401)
        self.assertFalse(Product.objects.filter(name="X").exists())

    def test_customer_cannot_modify_product(self):
        self.client.force_authenticate(self.customer)

        res = self.client.patch(f"{BASE}{self.product.id}/", {"price": "1.00"}, format="json")

        self.assertEqual(res.status_code, 403)
        self.product.refresh_from_db()
        self.assertEqual(self.product.price, Decimal("899.00"))

    def test_admin_without_product_flag_cannot_delete(self):
        self.client.force_authenticate(self.orders_only_admin)

        res = self.client.delete(f"{BASE}{self.product.id}/")

        self.assertEqual(res.status_code, 403)
        self.assertTrue(Product.objects.filter(pk=self.product.pk).exists())

    def test_catalog_admin_can_manage_products(self):
        self.client.force_authenticate(self.admin)

        created = self.client.post(
            BASE,
            {"name": "  Wall Clock ", "category": "home", "price": "1299.00"},
            format="json",
        )
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.data["name"], "Wall Clock")

        listed = self.client.get(BASE)
        self.assertIn("Prototype Chair", self._names(listed))

        res = self.client.patch(f"{BASE}{self.hidden.id}/", {"is_available": True}, format="json")
        self.assertEqual(res.status_code, 200)

    def test_zero_price_is_rejected(self):
        self.client.force_authenticate(self.admin)

        res = self.client.post(BASE, {"name": "Free", "price": "0.00"}, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertIn("price", res.data["details"])

    def test_related_products_share_category(self):
        for i in range(5):
            Product.objects.create(name=f"Shelf {i}", category="home", price=Decimal("100.00"))
        Product.objects.create(name="Frying Pan", category="kitchen", price=Decimal("650.00"))

        res = self.client.get(f"{BASE}{self.product.id}/related/")

        self.assertEqual(res.status_code, 200)
        names = self._names(res)
        self.assertEqual(len(res.data), 4)
        self.assertNotIn("Desk Lamp", names)
        self.assertNotIn("Prototype Chair", names)
        self.assertNotIn("Frying Pan", names)

    def test_related_for_hidden_product_is_404(self):
        res = self.client.get(f"{BASE}{self.hidden.id}/related/")
        self.assertEqual(res.status_code, 404)
