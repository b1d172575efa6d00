# PATH: payments/serializers.py

"""
PAYMENT SERIALIZERS (STOREFRONT CHECKOUT)

Transport-layer contracts for:
- payments/views/checkout.py  (create-order, verify-payment, save-order)

They validate request/response shapes, not business rules. Amount rules
live in payments.services.razorpay, pricing and totals in
orders.services.pricing, and trust decisions in payments.services.settlement.

Gateway field names (razorpay_order_id, razorpay_payment_id,
razorpay_signature) are accepted as aliases of the gateway_* fields so
the Razorpay checkout callback payload can be posted as-is.
"""

from __future__ import annotations

from rest_framework import serializers

GATEWAY_FIELD_ALIASES = {
    "razorpay_order_id": "gateway_order_id",
    "razorpay_payment_id": "gateway_payment_id",
    "razorpay_signature": "gateway_signature",
}


class GatewayAliasMixin:
    def to_internal_value(self, data):
        if hasattr(data, "items"):
            data = dict(data.items())
            for alias, field in GATEWAY_FIELD_ALIASES.items():
                if alias in data and data.get(field) in (None, ""):
                    data[field] = data.pop(alias)
        return super().to_internal_value(data)


class CreatePaymentOrderSerializer(serializers.Serializer):
    # Major units (rupees). Validated by the gateway adapter.
    amount = serializers.JSONField()
    currency = serializers.CharField(required=False, allow_blank=True, max_length=8)
    receipt = serializers.CharField(required=False, allow_blank=True, max_length=40)
    notes = serializers.DictField(required=False, child=serializers.CharField(allow_blank=True))


class CreatePaymentOrderResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    gateway_order_id = serializers.CharField()
    display_key = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    amount_minor = serializers.IntegerField()
    currency = serializers.CharField()
    receipt = serializers.CharField()


class VerifyPaymentSerializer(GatewayAliasMixin, serializers.Serializer):
    """
    Fields are optional at this layer: absent or blank values are reported
    together by the verifier (MissingParameter lists every missing name).
    Values are passed through untrimmed; the signature covers them verbatim.
    """

    gateway_order_id = serializers.CharField(required=False, allow_blank=True, default="", trim_whitespace=False)
    gateway_payment_id = serializers.CharField(required=False, allow_blank=True, default="", trim_whitespace=False)
    gateway_signature = serializers.CharField(required=False, allow_blank=True, default="", trim_whitespace=False)


class VerifyPaymentResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    verified = serializers.BooleanField()
    error = serializers.CharField(required=False)
    message = serializers.CharField()


class LineItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class ShippingAddressSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    region = serializers.CharField(max_length=100, required=False, allow_blank=True)
    postal_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=2, required=False, default="IN")
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)


class SaveOrderSerializer(VerifyPaymentSerializer):
    line_items = LineItemSerializer(many=True, allow_empty=False)
    total_amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        allow_null=True,
    )
    shipping_address = ShippingAddressSerializer(required=False, allow_null=True)
