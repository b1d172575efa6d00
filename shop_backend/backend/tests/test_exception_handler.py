# backend/tests/test_exception_handler.py

from django.http import Http404
from django.test import SimpleTestCase
from rest_framework import exceptions

from backend.exception_handler import api_exception_handler, status_code_for
from carts.exceptions import ProductUnavailable
from orders.exceptions import InvalidTransition, MissingRequiredField, OrderNotFound
from payments.exceptions import (
    DuplicateSettlement,
    GatewayRejected,
    GatewayUnavailable,
    InternalError,
    PaymentVerificationFailed,
)
from users.exceptions import CannotModifyOwnAccount, TooManyAttempts, UserHasOrders, UserNotFound


class _Fake:
    pass


class ExceptionHandlerTests(SimpleTestCase):
    """
    GUARANTEES:
    - Every error renders {"success": false, "error": ...}
    - Domain errors get their mapped status code
    - Unknown errors are a bare 500 and are logged
    """

    def _handle(self, exc):
        return api_exception_handler(exc, {"view": _Fake()})

    def test_domain_status_codes(self):
        cases = [
            (PaymentVerificationFailed(), 400),
            (DuplicateSettlement(), 409),
            (GatewayRejected(), 502),
            (GatewayUnavailable(), 503),
            (InternalError(), 500),
            (MissingRequiredField(["buyer"]), 400),
            (InvalidTransition(), 409),
            (OrderNotFound(), 404),
            (TooManyAttempts("Too many attempts. Request a new code."), 429),
            (UserNotFound(), 404),
            (CannotModifyOwnAccount(), 409),
            (UserHasOrders(), 409),
            (ProductUnavailable(), 400),
        ]
        for exc, code in cases:
            with self.subTest(exc=type(exc).__name__):
                res = self._handle(exc)
                self.assertEqual(res.status_code, code)
                self.assertEqual(res.data["success"], False)

    def test_gateway_raw_message_is_not_exposed(self):
        res = self._handle(GatewayRejected(raw_message="internal gateway detail"))
        self.assertEqual(res.data, {"success": False, "error": "Payment gateway rejected the request"})

    def test_subclass_inherits_base_code(self):
        class ShippingHold(InvalidTransition):
            pass

        self.assertEqual(status_code_for(ShippingHold()), 409)

    def test_validation_error_carries_details(self):
        res = self._handle(exceptions.ValidationError({"amount": ["This field is required."]}))

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"], "Invalid request")
        self.assertEqual(res.data["details"], {"amount": ["This field is required."]})

    def test_drf_errors_are_reshaped(self):
        res = self._handle(exceptions.NotAuthenticated())

        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.data, {"success": False, "error": "Authentication credentials were not provided."})

    def test_django_404(self):
        res = self._handle(Http404())
        self.assertEqual(res.status_code, 404)
        self.assertFalse(res.data["success"])

    def test_unknown_error_is_500_and_logged(self):
        with self.assertLogs("backend.exception_handler", level="ERROR"):
            res = self._handle(RuntimeError("secret stack detail"))

        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.data, {"success": False, "error": "Internal server error"})
