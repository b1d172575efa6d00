# payments/views/__init__.py

from .checkout import CreatePaymentOrderView, SaveOrderView, VerifyPaymentView

__all__ = [
    "CreatePaymentOrderView",
    "VerifyPaymentView",
    "SaveOrderView",
]
