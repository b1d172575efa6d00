# carts/views.py

"""
CART ENDPOINTS (AUTHENTICATED BUYER)

GET  /api/cart/                the caller's cart
POST /api/cart/items/add/      {product_id, quantity?=1}
POST /api/cart/items/remove/   {product_id, quantity?=1}
POST /api/cart/clear/

Each mutation returns the whole cart.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from carts.serializers import CartItemInputSerializer, CartSerializer
from carts.services import cart as cart_service


def _cart_response(cart, message=None):
    body = {"success": True, "cart": CartSerializer(cart).data}
    if message:
        body["message"] = message
    return Response(body)


class CartView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(responses={200: CartSerializer}, description="Get the caller's cart")
    def get(self, request):
        return _cart_response(cart_service.get_cart(request.user))


class AddCartItemView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(
        request=CartItemInputSerializer,
        responses={200: CartSerializer},
        description="Add a product to the cart (increments quantity if present)",
    )
    def post(self, request):
        serializer = CartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = cart_service.add_item(
            request.user,
            product_id=serializer.validated_data["product_id"],
            quantity=serializer.validated_data["quantity"],
        )
        return _cart_response(cart, "Added")


class RemoveCartItemView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(
        request=CartItemInputSerializer,
        responses={200: CartSerializer},
        description="Decrement a product's quantity; the line is dropped at zero",
    )
    def post(self, request):
        serializer = CartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = cart_service.remove_item(
            request.user,
            product_id=serializer.validated_data["product_id"],
            quantity=serializer.validated_data["quantity"],
        )
        return _cart_response(cart, "Removed")


class ClearCartView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSerializer

    @extend_schema(request=None, responses={200: CartSerializer})
    def post(self, request):
        return _cart_response(cart_service.clear_cart(request.user), "Cleared")
