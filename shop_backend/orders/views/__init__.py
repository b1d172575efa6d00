# orders/views/__init__.py

from .admin_orders import AdminOrderViewSet

__all__ = [
    "AdminOrderViewSet",
]
