# orders/services/ledger.py

"""
ORDER LEDGER (APPLICATION SERVICE)

Persists orders, enforces status transitions, aggregates statistics.

Hard rules:
- create_order is called by settlement only; it never decides payment
  status on its own, it records what settlement hands it.
- total_amount must equal Σ quantity × unit_price of the line items.
- Status changes go through order_lifecycle.validate_transition.
- A missing order is OrderNotFound; nothing is written.
"""

from __future__ import annotations

import logging
import math
from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from orders.exceptions import AmountMismatch, InvalidLineItem, MissingRequiredField, OrderNotFound
from orders.models import Order, OrderItem
from orders.services.order_lifecycle import (
    STATUS_TIMESTAMP_FIELDS,
    normalize_status,
    validate_transition,
)
from orders.services.pricing import line_total, money, to_int_qty
from products.models import Product

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_STATS_WINDOW_DAYS = 30

SORT_FIELDS = {
    "created_at": "created_at",
    "createdAt": "created_at",
    "updated_at": "updated_at",
    "updatedAt": "updated_at",
    "total_amount": "total_amount",
    "totalAmount": "total_amount",
    "order_status": "order_status",
    "orderStatus": "order_status",
}

PAYMENT_INFO_FIELDS = ("gateway_order_id", "gateway_payment_id", "payment_status")


# ============================================================
# Helpers
# ============================================================


def _positive_int(value, default: int) -> int:
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return n if n > 0 else default


def _lookup(order_id, *, for_update: bool = False) -> Order:
    qs = Order.objects.all()
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError, TypeError):
        raise OrderNotFound() from None


def _normalize_items(line_items) -> list[dict]:
    normalized = []
    for idx, raw in enumerate(line_items):
        product = raw.get("product")
        if product is None and raw.get("product_id"):
            try:
                product = Product.objects.filter(id=raw["product_id"]).first()
            except (ValidationError, ValueError):
                product = None
        if product is None:
            raise InvalidLineItem(f"line_items[{idx}] references an unknown product")

        if raw.get("unit_price") in (None, ""):
            raise MissingRequiredField([f"line_items[{idx}].unit_price"])

        unit_price = money(raw["unit_price"])
        if unit_price < Decimal("0.00"):
            raise InvalidLineItem(f"line_items[{idx}].unit_price must be >= 0")

        quantity = to_int_qty(raw.get("quantity"))

        normalized.append(
            {
                "product": product,
                "product_name": raw.get("product_name") or product.name,
                "quantity": quantity,
                "unit_price": unit_price,
                "line_total": line_total(quantity=quantity, unit_price=unit_price),
            }
        )
    return normalized


# ============================================================
# Commands
# ============================================================


@transaction.atomic
def create_order(
    *,
    buyer,
    line_items,
    total_amount,
    payment_info: dict | None,
    shipping_address: dict | None = None,
    currency: str = "INR",
) -> Order:
    missing = []
    if buyer is None:
        missing.append("buyer")
    if not line_items:
        missing.append("line_items")
    if total_amount is None or total_amount == "":
        missing.append("total_amount")
    if not payment_info:
        missing.append("payment_info")
    else:
        missing.extend(
            f"payment_info.{name}" for name in PAYMENT_INFO_FIELDS if not payment_info.get(name)
        )
    if missing:
        raise MissingRequiredField(missing)

    items = _normalize_items(line_items)

    total = money(total_amount)
    if total < Decimal("0.00"):
        raise AmountMismatch("total_amount must be >= 0")

    computed = money(sum((it["line_total"] for it in items), Decimal("0.00")))
    if computed != total:
        raise AmountMismatch(
            f"Order total does not match line items: total({total}) != sum({computed})"
        )

    order = Order.objects.create(
        buyer=buyer,
        total_amount=total,
        currency=(currency or "INR").strip().upper(),
        shipping_address=dict(shipping_address or {}),
        gateway_order_id=str(payment_info.get("gateway_order_id") or "").strip(),
        gateway_payment_id=str(payment_info.get("gateway_payment_id") or "").strip(),
        gateway_signature=str(payment_info.get("gateway_signature") or "").strip(),
        payment_status=payment_info["payment_status"],
        order_status=Order.STATUS_PROCESSING,
    )

    OrderItem.objects.bulk_create(
        [
            OrderItem(
                order=order,
                product=it["product"],
                product_name=it["product_name"],
                position=position,
                quantity=it["quantity"],
                unit_price=it["unit_price"],
                line_total=it["line_total"],
            )
            for position, it in enumerate(items)
        ]
    )

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.id),
            "order_no": order.order_no,
            "gateway_payment_id": order.gateway_payment_id,
            "total_amount": str(order.total_amount),
        },
    )
    return order


def update_order_status(order_id, new_status) -> Order:
    target = normalize_status(new_status)

    with transaction.atomic():
        order = _lookup(order_id, for_update=True)
        validate_transition(order=order, target_status=target)

        previous = order.order_status
        order.order_status = target
        fields = ["order_status", "updated_at"]

        stamp_field = STATUS_TIMESTAMP_FIELDS.get(target)
        if stamp_field and not getattr(order, stamp_field):
            setattr(order, stamp_field, timezone.now())
            fields.append(stamp_field)

        order.save(update_fields=fields)

    logger.info(
        "Order status updated",
        extra={"order_id": str(order.id), "from": previous, "to": target},
    )
    return order


def delete_order(order_id) -> bool:
    try:
        deleted, _ = Order.objects.filter(pk=order_id).delete()
    except (ValidationError, ValueError, TypeError):
        return False

    if deleted:
        logger.warning("Order deleted", extra={"order_id": str(order_id)})
    return bool(deleted)


# ============================================================
# Queries
# ============================================================


def get_order(order_id) -> Order:
    order = _lookup(order_id)
    return (
        Order.objects.select_related("buyer")
        .prefetch_related("items")
        .get(pk=order.pk)
    )


def find_by_gateway_payment_id(gateway_payment_id: str) -> Order | None:
    ref = str(gateway_payment_id or "").strip()
    if not ref:
        return None
    return Order.objects.filter(gateway_payment_id=ref).first()


def list_orders(
    *,
    status=None,
    sort_by=None,
    direction=None,
    page=DEFAULT_PAGE,
    page_size=DEFAULT_PAGE_SIZE,
) -> dict:
    page = _positive_int(page, DEFAULT_PAGE)
    page_size = min(_positive_int(page_size, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)

    qs = Order.objects.select_related("buyer").prefetch_related("items")

    if status not in (None, ""):
        qs = qs.filter(order_status=normalize_status(status))

    field = SORT_FIELDS.get(str(sort_by or "").strip(), "created_at")
    prefix = "" if str(direction or "").strip().lower() == "asc" else "-"
    # id tiebreak keeps offset pages disjoint when timestamps collide
    qs = qs.order_by(f"{prefix}{field}", f"{prefix}id")

    total_count = qs.count()
    skip = (page - 1) * page_size
    items = list(qs[skip : skip + page_size])

    return {
        "items": items,
        "total_count": total_count,
        "page": page,
        "page_size": page_size,
        "pages": math.ceil(total_count / page_size) if total_count else 0,
    }


def order_statistics(window_days=DEFAULT_STATS_WINDOW_DAYS, *, now=None) -> dict:
    """
    Dashboard numbers. "Recent" is measured from wall-clock now at call
    time, so two calls a day apart can differ with no data change.
    """
    window_days = _positive_int(window_days, DEFAULT_STATS_WINDOW_DAYS)
    now = now or timezone.now()
    since = now - timedelta(days=window_days)

    revenue_filter = Q(order_status__in=Order.REVENUE_STATUSES)
    recent_filter = Q(created_at__gte=since)

    totals = Order.objects.aggregate(
        total_orders=Count("id"),
        total_revenue=Sum("total_amount", filter=revenue_filter),
        recent_orders=Count("id", filter=recent_filter),
        recent_revenue=Sum("total_amount", filter=revenue_filter & recent_filter),
    )

    counts_by_status = {value: 0 for value, _label in Order.STATUS_CHOICES}
    for row in Order.objects.order_by().values("order_status").annotate(n=Count("id")):
        counts_by_status[row["order_status"]] = row["n"]

    return {
        "total_orders": totals["total_orders"] or 0,
        "counts_by_status": counts_by_status,
        "total_revenue": money(totals["total_revenue"]),
        "recent_orders": totals["recent_orders"] or 0,
        "recent_revenue": money(totals["recent_revenue"]),
        "window_days": window_days,
    }
