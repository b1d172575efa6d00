# orders/serializers/order.py

"""
ORDER SERIALIZERS

Read shapes for admin + buyer views, plus small input serializers for
status changes and list query params. Orders are never written through
a ModelSerializer; writes go through orders.services.ledger.
"""

from rest_framework import serializers

from orders.models import Order, OrderItem
from orders.services.ledger import DEFAULT_PAGE, DEFAULT_PAGE_SIZE


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "quantity",
            "unit_price",
            "line_total",
        ]
        read_only_fields = fields


class BuyerSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    email = serializers.EmailField()
    name = serializers.CharField()


class PaymentInfoSerializer(serializers.Serializer):
    gateway_order_id = serializers.CharField()
    gateway_payment_id = serializers.CharField(allow_null=True)
    payment_status = serializers.CharField()


class OrderSerializer(serializers.ModelSerializer):
    buyer = BuyerSummarySerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    payment_info = PaymentInfoSerializer(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_no",
            "buyer",
            "items",
            "total_amount",
            "currency",
            "shipping_address",
            "payment_info",
            "order_status",
            "created_at",
            "updated_at",
            "shipped_at",
            "delivered_at",
            "cancelled_at",
        ]
        read_only_fields = fields


class OrderStatusUpdateSerializer(serializers.Serializer):
    order_status = serializers.CharField()


class OrderListQuerySerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True)
    sort_by = serializers.CharField(required=False, allow_blank=True)
    order = serializers.ChoiceField(choices=["asc", "desc"], required=False)
    # Raw strings; the ledger coerces non-positive or non-numeric values
    # to the defaults and caps the page size.
    page = serializers.CharField(required=False, allow_blank=True, default=str(DEFAULT_PAGE))
    limit = serializers.CharField(required=False, allow_blank=True, default=str(DEFAULT_PAGE_SIZE))
