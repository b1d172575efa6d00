# payments/tests/test_razorpay.py

import base64
import io
import json
import socket
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

from django.test import SimpleTestCase, override_settings

from payments.exceptions import GatewayRejected, GatewayUnavailable, InvalidAmount
from payments.services import razorpay

RAZORPAY_TEST_SETTINGS = {
    "RAZORPAY": {
        "KEY_ID": "rzp_test_key",
        "KEY_SECRET": "test_key_secret",
        "TIMEOUT_SECONDS": 5,
        "DEFAULT_CURRENCY": "INR",
    }
}


def _http_response(payload):
    resp = MagicMock()
    resp.read.return_value = json.dumps(payload).encode("utf-8")
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp


def _http_error(code, payload):
    return HTTPError(
        url=f"{razorpay.RAZORPAY_BASE}/orders",
        code=code,
        msg="error",
        hdrs=None,
        fp=io.BytesIO(json.dumps(payload).encode("utf-8")),
    )


class MinorUnitConversionTests(SimpleTestCase):
    """
    GUARANTEES:
    - major -> minor is ×100, half-up, integer
    - zero / negative / non-numeric / non-finite amounts are refused
    """

    def test_conversion(self):
        self.assertEqual(razorpay.to_minor_units(499.50), 49950)
        self.assertEqual(razorpay.to_minor_units("1"), 100)
        self.assertEqual(razorpay.to_minor_units("0.015"), 2)

    def test_sub_half_paisa_rounds_to_zero_and_is_refused(self):
        with self.assertRaises(InvalidAmount):
            razorpay.to_minor_units("0.004")

    def test_invalid_amounts(self):
        for bad in (0, -5, "", None, "abc", "NaN", "Infinity", True):
            with self.subTest(amount=bad):
                with self.assertRaises(InvalidAmount):
                    razorpay.to_minor_units(bad)


@override_settings(PAYMENTS=RAZORPAY_TEST_SETTINGS)
class CreatePaymentIntentTests(SimpleTestCase):
    """
    GUARANTEES:
    - One POST /v1/orders with basic auth and the minor-unit amount
    - Gateway failures are classified (unavailable vs rejected)
    - Nothing is sent for an invalid amount
    """

    @patch("payments.services.razorpay.urlopen")
    def test_creates_gateway_order(self, mock_urlopen):
        mock_urlopen.return_value = _http_response({"id": "order_123", "amount": 49950, "status": "created"})

        result = razorpay.create_payment_intent(amount=499.50, receipt_id="r-1", metadata={"cart": "7"})

        self.assertEqual(result["gateway_order_id"], "order_123")
        self.assertEqual(result["amount_minor"], 49950)
        self.assertEqual(result["currency"], "INR")
        self.assertEqual(result["receipt"], "r-1")
        self.assertEqual(result["raw_gateway_order"]["status"], "created")

        req = mock_urlopen.call_args[0][0]
        self.assertEqual(req.full_url, "https://api.razorpay.com/v1/orders")
        self.assertEqual(req.get_method(), "POST")
        self.assertEqual(
            json.loads(req.data.decode("utf-8")),
            {"amount": 49950, "currency": "INR", "receipt": "r-1", "notes": {"cart": "7"}},
        )

        expected = base64.b64encode(b"rzp_test_key:test_key_secret").decode("ascii")
        self.assertEqual(req.get_header("Authorization"), f"Basic {expected}")
        self.assertEqual(mock_urlopen.call_args.kwargs["timeout"], 5)

    @patch("payments.services.razorpay.urlopen")
    def test_generates_receipt_when_absent(self, mock_urlopen):
        mock_urlopen.return_value = _http_response({"id": "order_9"})

        result = razorpay.create_payment_intent(amount="10", currency="usd")

        self.assertTrue(result["receipt"].startswith("receipt_"))
        self.assertEqual(result["currency"], "USD")

    @patch("payments.services.razorpay.urlopen")
    def test_invalid_amount_never_calls_gateway(self, mock_urlopen):
        with self.assertRaises(InvalidAmount):
            razorpay.create_payment_intent(amount=0)

        mock_urlopen.assert_not_called()

    @patch("payments.services.razorpay.urlopen")
    def test_4xx_is_rejected_with_gateway_message(self, mock_urlopen):
        mock_urlopen.side_effect = _http_error(
            400,
            {"error": {"code": "BAD_REQUEST_ERROR", "description": "The amount must be atleast INR 1.00"}},
        )

        with self.assertRaises(GatewayRejected) as ctx:
            razorpay.create_payment_intent(amount="0.5")

        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.raw_message, "The amount must be atleast INR 1.00")

    @patch("payments.services.razorpay.urlopen")
    def test_5xx_is_unavailable(self, mock_urlopen):
        mock_urlopen.side_effect = _http_error(503, {"error": {"description": "down"}})

        with self.assertRaises(GatewayUnavailable):
            razorpay.create_payment_intent(amount=100)

    @patch("payments.services.razorpay.urlopen")
    def test_timeout_is_unavailable(self, mock_urlopen):
        mock_urlopen.side_effect = socket.timeout("timed out")

        with self.assertRaises(GatewayUnavailable):
            razorpay.create_payment_intent(amount=100)

    @patch("payments.services.razorpay.urlopen")
    def test_connection_error_is_unavailable(self, mock_urlopen):
        mock_urlopen.side_effect = URLError("Name or service not known")

        with self.assertRaises(GatewayUnavailable):
            razorpay.create_payment_intent(amount=100)

    @patch("payments.services.razorpay.urlopen")
    def test_response_without_id_is_rejected(self, mock_urlopen):
        mock_urlopen.return_value = _http_response({"status": "created"})

        with self.assertRaises(GatewayRejected):
            razorpay.create_payment_intent(amount=100)

    @override_settings(PAYMENTS={"RAZORPAY": {"KEY_ID": "", "KEY_SECRET": ""}})
    @patch("payments.services.razorpay.urlopen")
    def test_missing_credentials_is_unavailable(self, mock_urlopen):
        with self.assertRaises(GatewayUnavailable):
            razorpay.create_payment_intent(amount=100)

        mock_urlopen.assert_not_called()
