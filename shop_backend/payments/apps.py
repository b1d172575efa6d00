# payments/apps.py

"""
PAYMENTS APP CONFIG

Razorpay checkout for the storefront:
- payment intents (remote gateway orders)
- signature verification (HMAC trust boundary)
- settlement (verified payment -> persisted Order)
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
