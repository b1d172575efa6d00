# orders/services/pricing.py

"""
LINE ITEM PRICING

Money values are computed server-side; the storefront never sets prices.

- resolve product_id -> Product (must exist and be available)
- unit_price = Product.price at settlement time
- total = Σ quantity × unit_price, 2dp half-up
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError

from orders.exceptions import InvalidLineItem, MissingRequiredField
from products.models import Product

TWOPLACES = Decimal("0.01")


def money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    try:
        return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidLineItem(f"Invalid money value: {v!r}") from exc


def to_int_qty(value) -> int:
    if value is None or value == "":
        raise InvalidLineItem("quantity is required")

    if isinstance(value, bool):
        raise InvalidLineItem("quantity must be a whole integer unit")

    if isinstance(value, int):
        qty = value
    elif isinstance(value, str) and value.strip().isdigit():
        qty = int(value.strip())
    else:
        raise InvalidLineItem("quantity must be a whole integer unit")

    if qty < 1:
        raise InvalidLineItem("quantity must be at least 1")
    return qty


def line_total(*, quantity: int, unit_price: Decimal) -> Decimal:
    return money(unit_price * Decimal(quantity))


def compute_total(items) -> Decimal:
    total = Decimal("0.00")
    for item in items:
        total += line_total(quantity=item["quantity"], unit_price=item["unit_price"])
    return money(total)


def _get_product(product_id) -> Product:
    try:
        product = Product.objects.filter(id=product_id).first()
    except (ValidationError, ValueError) as exc:
        raise InvalidLineItem(f"Unknown product: {product_id}") from exc

    if product is None:
        raise InvalidLineItem(f"Unknown product: {product_id}")
    if not product.is_available:
        raise InvalidLineItem(f"Product is not available: {product.name}")
    return product


def price_line_items(raw_items) -> list[dict]:
    """
    raw_items: [{"product_id": <uuid>, "quantity": <int>}, ...]
    Returns [{"product", "product_name", "quantity", "unit_price"}, ...]
    in the given order. Client unit prices are ignored.
    """
    if not raw_items:
        raise MissingRequiredField(["line_items"])

    priced = []
    for idx, raw in enumerate(raw_items):
        product_id = raw.get("product_id") or getattr(raw.get("product"), "id", None)
        if not product_id:
            raise InvalidLineItem(f"line_items[{idx}].product_id is required")

        product = _get_product(product_id)
        priced.append(
            {
                "product": product,
                "product_name": product.name,
                "quantity": to_int_qty(raw.get("quantity")),
                "unit_price": money(product.price),
            }
        )
    return priced
