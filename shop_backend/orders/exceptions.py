# orders/exceptions.py

"""
ORDER LEDGER ERRORS

Centralized domain errors for order persistence and lifecycle rules.
"""

from __future__ import annotations


class OrderLedgerError(Exception):
    """Base exception for all order ledger failures."""

    default_message = "Order error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingRequiredField(OrderLedgerError):
    """Raised when an order is created without a required field."""

    default_message = "Missing required order details"

    def __init__(self, fields: list[str] | None = None):
        self.fields = list(fields or [])
        message = self.default_message
        if self.fields:
            message = f"{message}: {', '.join(self.fields)}"
        super().__init__(message)


class InvalidLineItem(OrderLedgerError):
    """Raised when a line item has a bad quantity, price or product."""

    default_message = "Invalid line item"


class AmountMismatch(OrderLedgerError):
    """Raised when a client-supplied total disagrees with the line items."""

    default_message = "Order total does not match line items"


class InvalidStatus(OrderLedgerError):
    """Raised when a status value is not one of the known order statuses."""

    default_message = "Invalid order status"


class InvalidTransition(OrderLedgerError):
    """Raised when a lifecycle transition is not allowed."""

    default_message = "Order status transition not allowed"


class OrderNotFound(OrderLedgerError):
    """Raised when an order id does not exist."""

    default_message = "Order not found"
