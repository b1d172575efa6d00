"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Order entities.

    processing -> shipped | cancelled
    shipped    -> delivered | cancelled
    delivered, cancelled: terminal

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth
"""

from orders.exceptions import InvalidStatus, InvalidTransition
from orders.models import Order

# ============================================================
# STATE DEFINITIONS
# ============================================================

VALID_STATUSES = {value for value, _label in Order.STATUS_CHOICES}

TERMINAL_STATES = {
    Order.STATUS_DELIVERED,
    Order.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Order.STATUS_PROCESSING: {
        Order.STATUS_SHIPPED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_SHIPPED: {
        Order.STATUS_DELIVERED,
        Order.STATUS_CANCELLED,
    },
}

# Target status -> timestamp field stamped on entry
STATUS_TIMESTAMP_FIELDS = {
    Order.STATUS_SHIPPED: "shipped_at",
    Order.STATUS_DELIVERED: "delivered_at",
    Order.STATUS_CANCELLED: "cancelled_at",
}


# ============================================================
# DOMAIN RULES
# ============================================================


def normalize_status(value) -> str:
    status = str(value or "").strip().lower()
    if status not in VALID_STATUSES:
        raise InvalidStatus()
    return status


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, order: Order, target_status: str):
    if not can_transition(
        from_status=order.order_status,
        to_status=target_status,
    ):
        raise InvalidTransition(
            f"Order {order.order_no} cannot transition from "
            f"'{order.order_status}' to '{target_status}'"
        )

    if target_status == Order.STATUS_SHIPPED:
        if order.payment_status != Order.PAYMENT_COMPLETED:
            raise InvalidTransition(
                f"Order {order.order_no} cannot ship before payment is completed"
            )
        if not order.shipping_address:
            raise InvalidTransition(
                f"Order {order.order_no} cannot ship without a shipping address"
            )
