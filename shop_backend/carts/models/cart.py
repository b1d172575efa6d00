"""
PATH: carts/models/cart.py

CART MODEL

Rules:
- Exactly one cart per user (created lazily by carts.services.cart).
- The cart stores quantities only. Money is derived from the current
  catalog price each time the cart is read; settlement re-prices anyway.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models


class Cart(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cart",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def item_count(self) -> int:
        return sum(int(i.quantity) for i in self.items.all())

    @property
    def subtotal_amount(self) -> Decimal:
        return sum((i.line_total for i in self.items.all()), Decimal("0.00"))

    def __str__(self):
        return f"Cart {self.id} | {self.user}"
