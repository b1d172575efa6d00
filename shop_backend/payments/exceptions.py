# payments/exceptions.py

"""
PAYMENT SERVICE ERRORS

Centralized domain errors for the gateway adapter, the signature
verifier and the settlement orchestrator.
"""

from __future__ import annotations


class PaymentError(Exception):
    """Base exception for all payment flow failures."""

    default_message = "Payment error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidAmount(PaymentError):
    """Raised when a payment amount is not a positive, finite number."""

    default_message = "Valid amount is required"


class MissingParameter(PaymentError):
    """Raised when a verification parameter is empty or absent."""

    default_message = "Missing required payment verification parameters"

    def __init__(self, names: list[str] | None = None):
        self.names = list(names or [])
        message = self.default_message
        if self.names:
            message = f"{message}: {', '.join(self.names)}"
        super().__init__(message)


class PaymentVerificationFailed(PaymentError):
    """Raised when a payment signature does not match."""

    default_message = "Payment verification failed"


class GatewayError(PaymentError):
    """Base for downstream gateway failures. Carries the raw gateway message."""

    default_message = "Payment gateway error"

    def __init__(self, message: str | None = None, *, raw_message: str = "", status_code: int | None = None):
        self.raw_message = raw_message or ""
        self.status_code = status_code
        super().__init__(message)


class GatewayUnavailable(GatewayError):
    """Timeout, connection failure, 5xx, or missing gateway credentials."""

    default_message = "Payment gateway unavailable"


class GatewayRejected(GatewayError):
    """The gateway answered but refused the request (4xx / unusable body)."""

    default_message = "Payment gateway rejected the request"


class InternalError(PaymentError):
    """Unexpected failure; details go to logs, never to clients."""

    default_message = "Internal server error"


class DuplicateSettlement(PaymentError):
    """The gateway payment id is already attached to a different order."""

    default_message = "Payment has already been settled for another order"
