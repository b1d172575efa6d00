# carts/serializers.py

"""
CART SERIALIZERS

Totals are derived from current catalog prices; nothing money-related
is ever read from the client.
"""

from __future__ import annotations

from rest_framework import serializers

from carts.models import Cart, CartItem


class CartItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(source="product.id", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    image_url = serializers.CharField(source="product.image_url", read_only=True)
    is_available = serializers.BooleanField(source="product.is_available", read_only=True)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = [
            "product_id",
            "product_name",
            "image_url",
            "is_available",
            "quantity",
            "unit_price",
            "line_total",
        ]
        read_only_fields = fields


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    subtotal_amount = serializers.SerializerMethodField()

    class Meta:
        model = Cart
        fields = ["id", "items", "item_count", "subtotal_amount", "updated_at"]
        read_only_fields = fields

    def get_subtotal_amount(self, obj) -> str:
        return f"{obj.subtotal_amount:.2f}"


class CartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(required=False, min_value=1, default=1)
