# payments/services/settlement.py

"""
ORDER SETTLEMENT ORCHESTRATOR (APPLICATION SERVICE)

Two independent entry points:

1) initiate_payment(amount, currency?, receipt?, notes?)
   -> Razorpay order created remotely; returns its id + the public key id
      the storefront needs to open checkout.

2) confirm_and_settle(gateway_order_id, gateway_payment_id,
                      gateway_signature, order_input)
   -> signature verified FIRST, then the Order is written with
      payment_status = completed.

Hard rules:
- This is the only code path that creates an Order, and every Order it
  creates carries payment_status = completed.
- Verification failure -> PaymentVerificationFailed, nothing persisted.
- Retries are safe: gateway_payment_id is unique. A replay by the same
  buyer returns the existing order; a replay by anyone else is refused.
- Once a signature has verified, the money has moved. Any failure after
  that point is logged at CRITICAL with the gateway ids so it can be
  reconciled by hand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import IntegrityError

from orders.exceptions import AmountMismatch, OrderLedgerError
from orders.models import Order
from orders.services import ledger
from orders.services.pricing import compute_total, money, price_line_items
from payments.exceptions import (
    DuplicateSettlement,
    InternalError,
    MissingParameter,
    PaymentVerificationFailed,
)
from payments.services import razorpay
from payments.services.signature import (
    missing_signature_parameters,
    verify_payment_signature,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementResult:
    order: Order
    created: bool


def initiate_payment(*, amount, currency=None, receipt=None, notes=None) -> dict:
    intent = razorpay.create_payment_intent(
        amount=amount,
        currency=currency,
        receipt_id=receipt,
        metadata=notes,
    )
    return {
        "gateway_order_id": intent["gateway_order_id"],
        "display_key": razorpay.get_key_id(),
        "amount": money(amount),
        "amount_minor": intent["amount_minor"],
        "currency": intent["currency"],
        "receipt": intent["receipt"],
    }


def verify_payment(*, gateway_order_id, gateway_payment_id, gateway_signature) -> bool:
    """Signature check against the configured key secret. No persistence."""
    missing = missing_signature_parameters(
        order_id=gateway_order_id,
        payment_id=gateway_payment_id,
        signature=gateway_signature,
    )
    if missing:
        raise MissingParameter(missing)

    return verify_payment_signature(
        order_id=gateway_order_id,
        payment_id=gateway_payment_id,
        signature=gateway_signature,
        secret=razorpay.get_key_secret(),
    )


def _replay(existing: Order, *, buyer, gateway_order_id: str) -> SettlementResult:
    if existing.buyer_id != getattr(buyer, "pk", None) or existing.gateway_order_id != gateway_order_id:
        logger.error(
            "Payment id already settled for a different order",
            extra={
                "gateway_payment_id": existing.gateway_payment_id,
                "existing_order_id": str(existing.id),
            },
        )
        raise DuplicateSettlement()

    logger.info(
        "Settlement replay; returning existing order",
        extra={"order_id": str(existing.id), "gateway_payment_id": existing.gateway_payment_id},
    )
    return SettlementResult(order=existing, created=False)


def settle(
    *,
    gateway_order_id,
    gateway_payment_id,
    gateway_signature,
    order_input: dict,
) -> SettlementResult:
    gateway_order_id = str(gateway_order_id or "")
    gateway_payment_id = str(gateway_payment_id or "")
    gateway_signature = str(gateway_signature or "")

    # 1) Trust boundary. Nothing below runs unless this passes.
    verified = verify_payment(
        gateway_order_id=gateway_order_id,
        gateway_payment_id=gateway_payment_id,
        gateway_signature=gateway_signature,
    )
    if not verified:
        logger.warning(
            "Payment signature mismatch",
            extra={"gateway_order_id": gateway_order_id, "gateway_payment_id": gateway_payment_id},
        )
        raise PaymentVerificationFailed()

    buyer = order_input.get("buyer")

    # 2) Idempotent replay
    existing = ledger.find_by_gateway_payment_id(gateway_payment_id)
    if existing is not None:
        return _replay(existing, buyer=buyer, gateway_order_id=gateway_order_id)

    payment_info = {
        "gateway_order_id": gateway_order_id,
        "gateway_payment_id": gateway_payment_id,
        "gateway_signature": gateway_signature,
        "payment_status": Order.PAYMENT_COMPLETED,
    }
    recon = {
        "gateway_order_id": gateway_order_id,
        "gateway_payment_id": gateway_payment_id,
        "buyer_id": str(getattr(buyer, "pk", "") or ""),
    }

    # 3) Persist
    try:
        line_items = order_input.get("priced_line_items")
        if line_items is None:
            line_items = price_line_items(order_input.get("line_items"))

        total = compute_total(line_items)
        claimed = order_input.get("total_amount")
        if claimed not in (None, "") and money(claimed) != total:
            raise AmountMismatch(
                f"Order total does not match line items: total({money(claimed)}) != sum({total})"
            )

        order = ledger.create_order(
            buyer=buyer,
            line_items=line_items,
            total_amount=total,
            payment_info=payment_info,
            shipping_address=order_input.get("shipping_address"),
            currency=order_input.get("currency") or razorpay.default_currency(),
        )
    except IntegrityError:
        # Concurrent settlement of the same payment won the unique constraint.
        existing = ledger.find_by_gateway_payment_id(gateway_payment_id)
        if existing is None:
            logger.critical("Dangling payment: order write failed after verification", extra=recon, exc_info=True)
            raise InternalError()
        return _replay(existing, buyer=buyer, gateway_order_id=gateway_order_id)
    except OrderLedgerError as exc:
        logger.critical(
            "Dangling payment: verified payment rejected by ledger",
            extra={**recon, "reason": exc.message},
        )
        raise
    except Exception as exc:
        logger.critical("Dangling payment: order write failed after verification", extra=recon, exc_info=True)
        raise InternalError() from exc

    logger.info(
        "Payment settled",
        extra={"order_id": str(order.id), **recon},
    )
    return SettlementResult(order=order, created=True)


def confirm_and_settle(
    *,
    gateway_order_id,
    gateway_payment_id,
    gateway_signature,
    order_input: dict,
) -> Order:
    return settle(
        gateway_order_id=gateway_order_id,
        gateway_payment_id=gateway_payment_id,
        gateway_signature=gateway_signature,
        order_input=order_input,
    ).order
