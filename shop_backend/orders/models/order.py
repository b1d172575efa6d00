# orders/models/order.py

"""
ORDER

One purchase, created once at settlement time (after the payment
signature has been verified) and afterwards only moved along its
status lifecycle by admins.

Key rules:
- buyer is required and never reassigned
- gateway_payment_id is unique: one Razorpay payment settles at most one order
- order_status moves only through orders.services.order_lifecycle
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Order(models.Model):
    STATUS_PROCESSING = "processing"
    STATUS_SHIPPED = "shipped"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PROCESSING, "Processing"),
        (STATUS_SHIPPED, "Shipped"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_PENDING = "pending"
    PAYMENT_COMPLETED = "completed"
    PAYMENT_FAILED = "failed"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_COMPLETED, "Completed"),
        (PAYMENT_FAILED, "Failed"),
    ]

    REVENUE_STATUSES = (STATUS_SHIPPED, STATUS_DELIVERED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_no = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated public order number",
    )

    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    currency = models.CharField(max_length=8, default="INR")

    # name, street, city, region, postal_code, phone
    shipping_address = models.JSONField(default=dict, blank=True)

    # Payment info (Razorpay)
    gateway_order_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    gateway_payment_id = models.CharField(max_length=64, unique=True, null=True, blank=True)
    gateway_signature = models.CharField(max_length=128, blank=True, default="")
    payment_status = models.CharField(
        max_length=16,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_PENDING,
    )

    order_status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PROCESSING,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["created_at"], name="order_created_idx"),
            models.Index(fields=["order_status"], name="order_status_idx"),
            models.Index(fields=["order_status", "created_at"], name="order_status_created_idx"),
            models.Index(fields=["buyer", "created_at"], name="order_buyer_created_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self.order_no:
            prefix = timezone.now().strftime("ORD%Y%m%d")
            self.order_no = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"
        super().save(*args, **kwargs)

    @property
    def payment_info(self) -> dict:
        return {
            "gateway_order_id": self.gateway_order_id,
            "gateway_payment_id": self.gateway_payment_id,
            "gateway_signature": self.gateway_signature,
            "payment_status": self.payment_status,
        }

    def __str__(self):
        return f"{self.order_no} | {self.total_amount} | {self.order_status}"
