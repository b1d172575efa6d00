# orders/tests/test_ledger.py

import uuid
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone

from orders.exceptions import (
    AmountMismatch,
    InvalidLineItem,
    InvalidStatus,
    InvalidTransition,
    MissingRequiredField,
    OrderNotFound,
)
from orders.models import Order
from orders.services import ledger
from orders.tests.helpers import make_order
from products.models import Product

User = get_user_model()


class LedgerTestBase(TestCase):
    def setUp(self):
        self.buyer = User.objects.create_user(email="buyer@example.com", password="pass12345")
        self.product = Product.objects.create(name="Lamp", category="home", price=Decimal("100.00"))


class CreateOrderTests(LedgerTestBase):
    """
    GUARANTEES:
    - total_amount must equal the sum of line totals
    - every required field is checked, all missing ones reported
    - order_no is generated
    """

    def _payment(self, **overrides):
        info = {
            "gateway_order_id": "order_1",
            "gateway_payment_id": "pay_1",
            "gateway_signature": "sig",
            "payment_status": Order.PAYMENT_COMPLETED,
        }
        info.update(overrides)
        return info

    def test_create_order(self):
        order = ledger.create_order(
            buyer=self.buyer,
            line_items=[{"product_id": self.product.id, "quantity": 3, "unit_price": "100.00"}],
            total_amount="300.00",
            payment_info=self._payment(),
            shipping_address={"city": "Pune"},
        )

        self.assertTrue(order.order_no.startswith("ORD"))
        self.assertEqual(order.total_amount, Decimal("300.00"))
        self.assertEqual(order.items.get().line_total, Decimal("300.00"))
        self.assertEqual(order.shipping_address, {"city": "Pune"})

    def test_total_must_match_line_items(self):
        with self.assertRaises(AmountMismatch):
            ledger.create_order(
                buyer=self.buyer,
                line_items=[{"product": self.product, "quantity": 1, "unit_price": "100.00"}],
                total_amount="90.00",
                payment_info=self._payment(),
            )
        self.assertEqual(Order.objects.count(), 0)

    def test_missing_fields_are_all_reported(self):
        with self.assertRaises(MissingRequiredField) as ctx:
            ledger.create_order(
                buyer=None,
                line_items=[],
                total_amount=None,
                payment_info=self._payment(gateway_payment_id=""),
            )

        self.assertEqual(
            ctx.exception.fields,
            ["buyer", "line_items", "total_amount", "payment_info.gateway_payment_id"],
        )

    def test_quantity_must_be_whole_and_positive(self):
        for qty in (0, -1, "1.5", 2.0, True):
            with self.subTest(quantity=qty):
                with self.assertRaises(InvalidLineItem):
                    ledger.create_order(
                        buyer=self.buyer,
                        line_items=[{"product": self.product, "quantity": qty, "unit_price": "100.00"}],
                        total_amount="100.00",
                        payment_info=self._payment(),
                    )

    def test_unknown_product_is_rejected(self):
        with self.assertRaises(InvalidLineItem):
            ledger.create_order(
                buyer=self.buyer,
                line_items=[{"product_id": uuid.uuid4(), "quantity": 1, "unit_price": "1.00"}],
                total_amount="1.00",
                payment_info=self._payment(),
            )


class UpdateOrderStatusTests(LedgerTestBase):
    """
    GUARANTEES:
    - Lifecycle rules apply; timestamps are stamped on entry
    - Unknown id -> OrderNotFound, unknown status -> InvalidStatus
    """

    def test_ship_then_deliver(self):
        order = make_order(self.buyer, self.product)

        shipped = ledger.update_order_status(order.id, "shipped")
        self.assertEqual(shipped.order_status, Order.STATUS_SHIPPED)
        self.assertIsNotNone(shipped.shipped_at)

        delivered = ledger.update_order_status(order.id, "delivered")
        self.assertEqual(delivered.order_status, Order.STATUS_DELIVERED)
        self.assertIsNotNone(delivered.delivered_at)

    def test_delivered_cannot_be_cancelled(self):
        order = make_order(self.buyer, self.product, status=Order.STATUS_DELIVERED)

        with self.assertRaises(InvalidTransition):
            ledger.update_order_status(order.id, "cancelled")

        order.refresh_from_db()
        self.assertEqual(order.order_status, Order.STATUS_DELIVERED)

    def test_same_status_is_rejected(self):
        order = make_order(self.buyer, self.product)

        with self.assertRaises(InvalidTransition):
            ledger.update_order_status(order.id, "processing")

    def test_unknown_status(self):
        order = make_order(self.buyer, self.product)

        with self.assertRaises(InvalidStatus):
            ledger.update_order_status(order.id, "lost")

    def test_missing_order(self):
        with self.assertRaises(OrderNotFound):
            ledger.update_order_status(uuid.uuid4(), "shipped")

        with self.assertRaises(OrderNotFound):
            ledger.update_order_status("not-a-uuid", "shipped")


class DeleteAndGetTests(LedgerTestBase):
    def test_delete_order(self):
        order = make_order(self.buyer, self.product)

        self.assertTrue(ledger.delete_order(order.id))
        self.assertFalse(ledger.delete_order(order.id))
        self.assertFalse(ledger.delete_order("nope"))

    def test_get_order(self):
        order = make_order(self.buyer, self.product)
        self.assertEqual(ledger.get_order(order.id).pk, order.pk)

        with self.assertRaises(OrderNotFound):
            ledger.get_order(uuid.uuid4())

    def test_find_by_gateway_payment_id(self):
        order = make_order(self.buyer, self.product)

        self.assertEqual(ledger.find_by_gateway_payment_id(order.gateway_payment_id).pk, order.pk)
        self.assertIsNone(ledger.find_by_gateway_payment_id(""))
        self.assertIsNone(ledger.find_by_gateway_payment_id("pay_missing"))


class ListOrdersTests(LedgerTestBase):
    """
    GUARANTEES:
    - Offset pagination, pages disjoint and complete
    - Status filter, whitelisted sort keys
    - Page size capped
    """

    def test_pagination(self):
        base = timezone.now()
        for i in range(25):
            order = make_order(self.buyer, self.product)
            # a few shared timestamps exercise the id tiebreak
            Order.objects.filter(pk=order.pk).update(created_at=base - timedelta(minutes=i // 2))

        seen = set()
        sizes = []
        created = []
        for page in (1, 2, 3):
            result = ledger.list_orders(page=page, page_size=10)
            self.assertEqual(result["total_count"], 25)
            self.assertEqual(result["pages"], 3)
            sizes.append(len(result["items"]))
            seen.update(o.pk for o in result["items"])
            created.extend(o.created_at for o in result["items"])

        self.assertEqual(sizes, [10, 10, 5])
        self.assertEqual(len(seen), 25)
        self.assertEqual(created, sorted(created, reverse=True))

    def test_page_past_end_is_empty(self):
        make_order(self.buyer, self.product)

        result = ledger.list_orders(page=5, page_size=10)
        self.assertEqual(result["items"], [])
        self.assertEqual(result["total_count"], 1)

    def test_status_filter(self):
        make_order(self.buyer, self.product)
        shipped = make_order(self.buyer, self.product, status=Order.STATUS_SHIPPED)

        result = ledger.list_orders(status="shipped")
        self.assertEqual([o.pk for o in result["items"]], [shipped.pk])

        with self.assertRaises(InvalidStatus):
            ledger.list_orders(status="bogus")

    def test_sort_by_total_ascending(self):
        make_order(self.buyer, self.product, unit_price="30.00")
        make_order(self.buyer, self.product, unit_price="10.00")
        make_order(self.buyer, self.product, unit_price="20.00")

        result = ledger.list_orders(sort_by="totalAmount", direction="asc")
        self.assertEqual(
            [o.total_amount for o in result["items"]],
            [Decimal("10.00"), Decimal("20.00"), Decimal("30.00")],
        )

    def test_unknown_sort_key_falls_back_to_newest_first(self):
        make_order(self.buyer, self.product)
        result = ledger.list_orders(sort_by="password")
        self.assertEqual(len(result["items"]), 1)

    def test_page_size_is_capped(self):
        result = ledger.list_orders(page_size=10_000)
        self.assertEqual(result["page_size"], ledger.MAX_PAGE_SIZE)

    def test_invalid_page_values_use_defaults(self):
        result = ledger.list_orders(page="abc", page_size=0)
        self.assertEqual(result["page"], ledger.DEFAULT_PAGE)
        self.assertEqual(result["page_size"], ledger.DEFAULT_PAGE_SIZE)


class OrderStatisticsTests(LedgerTestBase):
    """
    GUARANTEES:
    - Revenue counts shipped + delivered only
    - counts_by_status lists every status, zeros included
    - recent_* only counts orders inside the window
    """

    def test_statistics(self):
        make_order(self.buyer, self.product, unit_price="100.00", status=Order.STATUS_SHIPPED)
        make_order(self.buyer, self.product, unit_price="250.00", status=Order.STATUS_DELIVERED)
        make_order(self.buyer, self.product, unit_price="500.00")
        make_order(self.buyer, self.product, unit_price="75.00", status=Order.STATUS_CANCELLED)

        old = make_order(self.buyer, self.product, unit_price="1000.00", status=Order.STATUS_DELIVERED)
        Order.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=45))

        stats = ledger.order_statistics(30)

        self.assertEqual(stats["total_orders"], 5)
        self.assertEqual(stats["total_revenue"], Decimal("1350.00"))
        self.assertEqual(stats["recent_orders"], 4)
        self.assertEqual(stats["recent_revenue"], Decimal("350.00"))
        self.assertEqual(
            stats["counts_by_status"],
            {"processing": 1, "shipped": 1, "delivered": 2, "cancelled": 1},
        )

    def test_empty_ledger(self):
        stats = ledger.order_statistics()

        self.assertEqual(stats["total_orders"], 0)
        self.assertEqual(stats["total_revenue"], Decimal("0.00"))
        self.assertEqual(stats["counts_by_status"]["processing"], 0)
        self.assertEqual(stats["window_days"], ledger.DEFAULT_STATS_WINDOW_DAYS)
