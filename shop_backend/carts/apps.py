# carts/apps.py

"""
CARTS APP CONFIG

Per-buyer shopping cart storage:
- one cart per user, created on first use
- product + quantity lines; prices are always read from the catalog
"""

from django.apps import AppConfig


class CartsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "carts"
    verbose_name = "Carts"
