# payments/tests/test_settlement.py

from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from orders.exceptions import AmountMismatch, InvalidLineItem
from orders.models import Order, OrderItem
from payments.exceptions import (
    DuplicateSettlement,
    GatewayUnavailable,
    InternalError,
    MissingParameter,
    PaymentVerificationFailed,
)
from payments.services.settlement import confirm_and_settle, settle, verify_payment
from payments.services.signature import compute_payment_signature
from payments.tests.test_razorpay import RAZORPAY_TEST_SETTINGS
from products.models import Product

User = get_user_model()

SECRET = RAZORPAY_TEST_SETTINGS["RAZORPAY"]["KEY_SECRET"]


def _signature(order_id, payment_id):
    return compute_payment_signature(order_id=order_id, payment_id=payment_id, secret=SECRET)


@override_settings(PAYMENTS=RAZORPAY_TEST_SETTINGS)
class SettlementTests(TestCase):
    """
    Settlement orchestrator tests.

    GUARANTEES:
    - Verification runs first; a bad signature persists nothing
    - Settled orders are always payment_status=completed
    - Prices come from the catalog, never the client
    - Replays are idempotent for the same buyer, refused for anyone else
    - Failures after verification are logged CRITICAL for reconciliation
    """

    def setUp(self):
        self.buyer = User.objects.create_user(email="buyer@example.com", password="pass12345")
        self.other = User.objects.create_user(email="other@example.com", password="pass12345")

        self.shirt = Product.objects.create(name="Shirt", category="apparel", price=Decimal("199.50"))
        self.cap = Product.objects.create(name="Cap", category="apparel", price=Decimal("100.50"))

    def _input(self, **overrides):
        data = {
            "buyer": self.buyer,
            "line_items": [
                {"product_id": self.shirt.id, "quantity": 2},
                {"product_id": self.cap.id, "quantity": 1},
            ],
            "shipping_address": {"name": "A", "street": "1 Main", "city": "Pune", "postal_code": "411001"},
        }
        data.update(overrides)
        return data

    def _settle(self, order_id="order_A", payment_id="pay_B", signature=None, **input_overrides):
        return settle(
            gateway_order_id=order_id,
            gateway_payment_id=payment_id,
            gateway_signature=signature if signature is not None else _signature(order_id, payment_id),
            order_input=self._input(**input_overrides),
        )

    # --------------------------------------------------
    # Happy path
    # --------------------------------------------------

    def test_valid_signature_creates_completed_order(self):
        result = self._settle()

        self.assertTrue(result.created)
        order = result.order
        self.assertEqual(order.payment_status, Order.PAYMENT_COMPLETED)
        self.assertEqual(order.order_status, Order.STATUS_PROCESSING)
        self.assertEqual(order.gateway_order_id, "order_A")
        self.assertEqual(order.gateway_payment_id, "pay_B")
        self.assertEqual(order.buyer, self.buyer)
        self.assertEqual(order.total_amount, Decimal("499.50"))
        self.assertEqual(order.currency, "INR")

        items = list(order.items.all())
        self.assertEqual([i.product_name for i in items], ["Shirt", "Cap"])
        self.assertEqual(items[0].unit_price, Decimal("199.50"))
        self.assertEqual(items[0].line_total, Decimal("399.00"))

    def test_confirm_and_settle_returns_order(self):
        order = confirm_and_settle(
            gateway_order_id="order_A",
            gateway_payment_id="pay_B",
            gateway_signature=_signature("order_A", "pay_B"),
            order_input=self._input(),
        )
        self.assertIsInstance(order, Order)

    def test_matching_client_total_is_accepted(self):
        result = self._settle(total_amount="499.50")
        self.assertEqual(result.order.total_amount, Decimal("499.50"))

    # --------------------------------------------------
    # Trust boundary
    # --------------------------------------------------

    def test_altered_signature_persists_nothing(self):
        good = _signature("order_A", "pay_B")
        bad = ("0" if good[0] != "0" else "1") + good[1:]

        with self.assertRaises(PaymentVerificationFailed):
            self._settle(signature=bad)

        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(OrderItem.objects.count(), 0)

    def test_missing_parameters(self):
        with self.assertRaises(MissingParameter):
            self._settle(payment_id="", signature="abc")

        self.assertEqual(Order.objects.count(), 0)

    @override_settings(PAYMENTS={"RAZORPAY": {"KEY_ID": "", "KEY_SECRET": ""}})
    def test_unconfigured_secret_is_unavailable(self):
        with self.assertRaises(GatewayUnavailable):
            verify_payment(gateway_order_id="a", gateway_payment_id="b", gateway_signature="c")

    @override_settings(PAYMENTS={"RAZORPAY": {"KEY_ID": "", "KEY_SECRET": ""}})
    def test_missing_parameters_reported_before_secret_lookup(self):
        with self.assertRaises(MissingParameter) as ctx:
            verify_payment(gateway_order_id="", gateway_payment_id="", gateway_signature="")

        self.assertEqual(ctx.exception.names, ["order_id", "payment_id", "signature"])

    # --------------------------------------------------
    # Idempotency
    # --------------------------------------------------

    def test_replay_by_same_buyer_returns_existing_order(self):
        first = self._settle()
        second = self._settle()

        self.assertFalse(second.created)
        self.assertEqual(first.order.pk, second.order.pk)
        self.assertEqual(Order.objects.count(), 1)

    def test_replay_by_other_buyer_is_refused(self):
        self._settle()

        with self.assertRaises(DuplicateSettlement):
            self._settle(buyer=self.other)

        self.assertEqual(Order.objects.count(), 1)

    # --------------------------------------------------
    # Failures after verification
    # --------------------------------------------------

    def test_client_total_mismatch_is_rejected_and_logged(self):
        with self.assertLogs("payments.services.settlement", level="CRITICAL") as logs:
            with self.assertRaises(AmountMismatch):
                self._settle(total_amount="10.00")

        self.assertEqual(Order.objects.count(), 0)
        self.assertIn("Dangling payment", logs.output[0])

    def test_unavailable_product_is_rejected(self):
        self.cap.is_available = False
        self.cap.save()

        with self.assertLogs("payments.services.settlement", level="CRITICAL"):
            with self.assertRaises(InvalidLineItem):
                self._settle()

        self.assertEqual(Order.objects.count(), 0)

    @patch("payments.services.settlement.ledger.create_order", side_effect=RuntimeError("db down"))
    def test_unexpected_write_failure_is_internal_error(self, _mock_create):
        with self.assertLogs("payments.services.settlement", level="CRITICAL") as logs:
            with self.assertRaises(InternalError) as ctx:
                self._settle()

        self.assertEqual(ctx.exception.message, "Internal server error")
        self.assertIn("Dangling payment", logs.output[0])
