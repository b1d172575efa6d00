# orders/serializers/__init__.py

from .order import (
    OrderItemSerializer,
    OrderListQuerySerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
)

__all__ = [
    "OrderItemSerializer",
    "OrderSerializer",
    "OrderStatusUpdateSerializer",
    "OrderListQuerySerializer",
]
