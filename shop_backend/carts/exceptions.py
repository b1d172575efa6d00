# carts/exceptions.py

"""
CART ERRORS
"""

from __future__ import annotations


class CartError(Exception):
    """Base exception for cart failures."""

    default_message = "Cart error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ProductUnavailable(CartError):
    """Unknown product id, or a product hidden from the storefront."""

    default_message = "Product not available"


class InvalidCartQuantity(CartError):
    default_message = "Quantity must be a positive whole number"
