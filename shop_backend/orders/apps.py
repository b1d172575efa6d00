# orders/apps.py

"""
ORDERS APP CONFIG

Order ledger:
- Order + OrderItem persistence
- status lifecycle (processing -> shipped -> delivered, cancel branches)
- admin order management + statistics
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Orders"
