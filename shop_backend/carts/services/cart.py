# carts/services/cart.py

"""
CART SERVICE

Buyer-owned cart storage:
- get_cart(user)                         -> the user's cart (created on first use)
- add_item(user, product_id, quantity)   -> increments the product's line
- remove_item(user, product_id, quantity)-> decrements; a line reaching 0 is deleted
- clear_cart(user)

Only products visible in the storefront (is_available) can be added.
Removing a product that is not in the cart is a no-op.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from carts.exceptions import InvalidCartQuantity, ProductUnavailable
from carts.models import Cart, CartItem
from products.models import Product

logger = logging.getLogger(__name__)


def _quantity(value) -> int:
    if isinstance(value, bool):
        raise InvalidCartQuantity()
    try:
        qty = int(value)
    except (TypeError, ValueError):
        raise InvalidCartQuantity() from None
    if qty < 1:
        raise InvalidCartQuantity()
    return qty


def _cart_for_update(user) -> Cart:
    cart, _ = Cart.objects.get_or_create(user=user)
    return Cart.objects.select_for_update().get(pk=cart.pk)


def get_cart(user) -> Cart:
    cart, _ = Cart.objects.get_or_create(user=user)
    return Cart.objects.prefetch_related("items__product").get(pk=cart.pk)


def add_item(user, *, product_id, quantity=1) -> Cart:
    qty = _quantity(quantity)

    try:
        product = Product.objects.filter(pk=product_id, is_available=True).first()
    except (ValidationError, ValueError):
        product = None
    if product is None:
        raise ProductUnavailable()

    with transaction.atomic():
        cart = _cart_for_update(user)
        item = CartItem.objects.filter(cart=cart, product=product).first()
        if item is None:
            CartItem.objects.create(cart=cart, product=product, quantity=qty)
        else:
            item.quantity = int(item.quantity) + qty
            item.save(update_fields=["quantity", "updated_at"])
        cart.save(update_fields=["updated_at"])

    logger.info(
        "Cart item added",
        extra={"user_id": str(user.pk), "product_id": str(product.pk), "quantity": qty},
    )
    return get_cart(user)


def remove_item(user, *, product_id, quantity=1) -> Cart:
    qty = _quantity(quantity)

    with transaction.atomic():
        cart = _cart_for_update(user)
        try:
            item = CartItem.objects.filter(cart=cart, product_id=product_id).first()
        except (ValidationError, ValueError):
            item = None

        if item is not None:
            remaining = int(item.quantity) - qty
            if remaining > 0:
                item.quantity = remaining
                item.save(update_fields=["quantity", "updated_at"])
            else:
                item.delete()
            cart.save(update_fields=["updated_at"])

    return get_cart(user)


def clear_cart(user) -> Cart:
    with transaction.atomic():
        cart = _cart_for_update(user)
        cart.items.all().delete()
        cart.save(update_fields=["updated_at"])

    return get_cart(user)
