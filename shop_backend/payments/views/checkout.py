# payments/views/checkout.py

"""
STOREFRONT CHECKOUT ENDPOINTS (RAZORPAY)

POST /api/payments/create-order/     AllowAny
POST /api/payments/verify-payment/   AllowAny (informational, never persists)
POST /api/payments/save-order/       authenticated buyer

Flow seen by the storefront:
1) create-order -> gateway_order_id + display_key -> open Razorpay checkout
2) checkout callback hands back (order_id, payment_id, signature)
3) save-order with those three values + cart -> Order (payment completed)

Errors are domain exceptions rendered by backend.exception_handler.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.serializers import OrderSerializer
from orders.services.ledger import get_order
from payments.serializers import (
    CreatePaymentOrderResponseSerializer,
    CreatePaymentOrderSerializer,
    SaveOrderSerializer,
    VerifyPaymentResponseSerializer,
    VerifyPaymentSerializer,
)
from payments.services.settlement import initiate_payment, settle, verify_payment

logger = logging.getLogger(__name__)


class CreatePaymentOrderView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "payment_write"

    @extend_schema(
        request=CreatePaymentOrderSerializer,
        responses={
            200: CreatePaymentOrderResponseSerializer,
            400: OpenApiResponse(description="Invalid amount"),
            502: OpenApiResponse(description="Gateway rejected the request"),
            503: OpenApiResponse(description="Gateway unavailable"),
        },
        description="Create a Razorpay order for the given amount (major units).",
    )
    def post(self, request):
        serializer = CreatePaymentOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = initiate_payment(
            amount=data.get("amount"),
            currency=data.get("currency") or None,
            receipt=data.get("receipt") or None,
            notes=data.get("notes"),
        )

        return Response({"success": True, **result}, status=status.HTTP_200_OK)


class VerifyPaymentView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "payment_write"

    @extend_schema(
        request=VerifyPaymentSerializer,
        responses={
            200: VerifyPaymentResponseSerializer,
            400: VerifyPaymentResponseSerializer,
        },
        description="Check a Razorpay checkout signature. Does not create an order.",
    )
    def post(self, request):
        serializer = VerifyPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        verified = verify_payment(
            gateway_order_id=data["gateway_order_id"],
            gateway_payment_id=data["gateway_payment_id"],
            gateway_signature=data["gateway_signature"],
        )

        if not verified:
            return Response(
                {
                    "success": False,
                    "verified": False,
                    "error": "Payment verification failed",
                    "message": "Payment verification failed",
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response({"success": True, "verified": True, "message": "Payment verified successfully"})


class SaveOrderView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "payment_write"

    @extend_schema(
        request=SaveOrderSerializer,
        responses={
            201: OrderSerializer,
            200: OpenApiResponse(OrderSerializer, description="Replay: order already settled"),
            400: OpenApiResponse(description="Verification failed or invalid cart"),
            401: OpenApiResponse(description="Authentication required"),
            409: OpenApiResponse(description="Payment already settled for another order"),
        },
        description="Verify the payment signature and record the order.",
    )
    def post(self, request):
        serializer = SaveOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = settle(
            gateway_order_id=data["gateway_order_id"],
            gateway_payment_id=data["gateway_payment_id"],
            gateway_signature=data["gateway_signature"],
            order_input={
                "buyer": request.user,
                "line_items": [dict(item) for item in data["line_items"]],
                "total_amount": data.get("total_amount"),
                "shipping_address": dict(data.get("shipping_address") or {}),
            },
        )

        order = get_order(result.order.pk)
        return Response(
            {
                "success": True,
                "message": "Order saved successfully" if result.created else "Order already saved",
                "order": OrderSerializer(order).data,
            },
            status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        )
