# backend/exception_handler.py

"""
API EXCEPTION HANDLER (REST_FRAMEWORK["EXCEPTION_HANDLER"])

Every error leaves the API in one shape:

    {"success": false, "error": "<message>"}
    {"success": false, "error": "Invalid request", "details": {...}}   (validation)

- Domain errors (payments, orders, carts, users) are mapped to a status
  code by type. Lookup walks the MRO, so a subclass inherits its base's
  code unless it has its own row.
- DRF errors (auth, permission, throttling, validation, 404, 405) keep
  DRF's status code and headers; only the body is reshaped.
- Anything else is logged with its traceback and rendered as a bare 500.
"""

from __future__ import annotations

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from carts.exceptions import CartError, InvalidCartQuantity, ProductUnavailable
from orders.exceptions import (
    AmountMismatch,
    InvalidLineItem,
    InvalidStatus,
    InvalidTransition,
    MissingRequiredField,
    OrderLedgerError,
    OrderNotFound,
)
from payments.exceptions import (
    DuplicateSettlement,
    GatewayError,
    GatewayRejected,
    GatewayUnavailable,
    InternalError,
    InvalidAmount,
    MissingParameter,
    PaymentError,
    PaymentVerificationFailed,
)
from users.exceptions import (
    CannotModifyOwnAccount,
    EmailAlreadyRegistered,
    InvalidVerificationCode,
    RegistrationError,
    TooManyAttempts,
    UserDirectoryError,
    UserHasOrders,
    UserNotFound,
    VerificationExpired,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"

# Map exception types to HTTP status codes
ERROR_STATUS_CODES: dict[type, int] = {
    # payments
    PaymentError: status.HTTP_400_BAD_REQUEST,
    InvalidAmount: status.HTTP_400_BAD_REQUEST,
    MissingParameter: status.HTTP_400_BAD_REQUEST,
    PaymentVerificationFailed: status.HTTP_400_BAD_REQUEST,
    DuplicateSettlement: status.HTTP_409_CONFLICT,
    GatewayError: status.HTTP_502_BAD_GATEWAY,
    GatewayRejected: status.HTTP_502_BAD_GATEWAY,
    GatewayUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    InternalError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    # orders
    OrderLedgerError: status.HTTP_400_BAD_REQUEST,
    MissingRequiredField: status.HTTP_400_BAD_REQUEST,
    InvalidLineItem: status.HTTP_400_BAD_REQUEST,
    AmountMismatch: status.HTTP_400_BAD_REQUEST,
    InvalidStatus: status.HTTP_400_BAD_REQUEST,
    InvalidTransition: status.HTTP_409_CONFLICT,
    OrderNotFound: status.HTTP_404_NOT_FOUND,
    # registration
    RegistrationError: status.HTTP_400_BAD_REQUEST,
    EmailAlreadyRegistered: status.HTTP_409_CONFLICT,
    InvalidVerificationCode: status.HTTP_400_BAD_REQUEST,
    VerificationExpired: status.HTTP_400_BAD_REQUEST,
    TooManyAttempts: status.HTTP_429_TOO_MANY_REQUESTS,
    # user directory
    UserDirectoryError: status.HTTP_400_BAD_REQUEST,
    UserNotFound: status.HTTP_404_NOT_FOUND,
    CannotModifyOwnAccount: status.HTTP_409_CONFLICT,
    UserHasOrders: status.HTTP_409_CONFLICT,
    # carts
    CartError: status.HTTP_400_BAD_REQUEST,
    ProductUnavailable: status.HTTP_400_BAD_REQUEST,
    InvalidCartQuantity: status.HTTP_400_BAD_REQUEST,
}

DOMAIN_ERRORS = (PaymentError, OrderLedgerError, RegistrationError, UserDirectoryError, CartError)


def status_code_for(exc: Exception) -> int | None:
    for klass in type(exc).__mro__:
        code = ERROR_STATUS_CODES.get(klass)
        if code is not None:
            return code
    return None


def _error_body(message: str, details=None) -> dict:
    body = {"success": False, "error": message}
    if details is not None:
        body["details"] = details
    return body


def _drf_message(exc: exceptions.APIException) -> str:
    detail = exc.detail
    if isinstance(detail, str):
        return str(detail)
    return str(exc.default_detail)


def api_exception_handler(exc, context):
    if isinstance(exc, DOMAIN_ERRORS):
        code = status_code_for(exc) or status.HTTP_400_BAD_REQUEST
        message = getattr(exc, "message", None) or str(exc)
        return Response(_error_body(message), status=code)

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view") if context else None
        logger.exception(
            "Unhandled API error",
            extra={"view": view.__class__.__name__ if view else None},
        )
        return Response(
            _error_body(INTERNAL_ERROR_MESSAGE),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = _error_body("Invalid request", details=response.data)
    elif isinstance(exc, exceptions.APIException):
        response.data = _error_body(_drf_message(exc))
    else:
        # Http404 / PermissionDenied from Django, already translated by DRF
        detail = response.data.get("detail") if isinstance(response.data, dict) else None
        response.data = _error_body(str(detail or "Request failed"))

    return response
