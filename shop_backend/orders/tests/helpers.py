# orders/tests/helpers.py

from decimal import Decimal
from itertools import count

from orders.models import Order
from orders.services import ledger

_payment_ids = count(1)


def make_order(buyer, product, *, quantity=1, unit_price=None, status=None, shipping_address=None):
    """Create a settled order through the ledger; optionally force its status."""
    unit_price = Decimal(str(unit_price if unit_price is not None else product.price))
    n = next(_payment_ids)

    order = ledger.create_order(
        buyer=buyer,
        line_items=[{"product": product, "quantity": quantity, "unit_price": unit_price}],
        total_amount=unit_price * quantity,
        payment_info={
            "gateway_order_id": f"order_T{n}",
            "gateway_payment_id": f"pay_T{n}",
            "gateway_signature": "sig",
            "payment_status": Order.PAYMENT_COMPLETED,
        },
        shipping_address={"city": "Pune"} if shipping_address is None else shipping_address,
    )

    if status and status != order.order_status:
        Order.objects.filter(pk=order.pk).update(order_status=status)
        order.refresh_from_db()

    return order
