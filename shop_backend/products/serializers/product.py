# products/serializers/product.py

from decimal import Decimal

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "category",
            "description",
            "image_url",
            "price",
            "compare_at_price",
            "is_available",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_category(self, value):
        return (value or "").strip()

    def validate_price(self, value):
        if value is None or value <= Decimal("0.00"):
            raise serializers.ValidationError("Price must be greater than zero")
        return value
