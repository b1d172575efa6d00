# orders/admin.py

"""
ORDERS ADMIN

Read-mostly view of the ledger. Status changes belong to the API
(lifecycle rules); payment fields are never editable here.
"""

from __future__ import annotations

from django.contrib import admin

from orders.models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    fields = ("product", "product_name", "quantity", "unit_price", "line_total")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_no",
        "buyer",
        "total_amount",
        "currency",
        "payment_status",
        "order_status",
        "created_at",
    )
    list_filter = ("order_status", "payment_status", "created_at")
    search_fields = ("order_no", "buyer__email", "gateway_order_id", "gateway_payment_id")
    ordering = ("-created_at",)
    readonly_fields = (
        "order_no",
        "buyer",
        "total_amount",
        "currency",
        "shipping_address",
        "gateway_order_id",
        "gateway_payment_id",
        "gateway_signature",
        "payment_status",
        "order_status",
        "created_at",
        "updated_at",
        "shipped_at",
        "delivered_at",
        "cancelled_at",
    )
    inlines = [OrderItemInline]

    def has_add_permission(self, request):
        return False
