# payments/services/razorpay.py

"""
RAZORPAY GATEWAY ADAPTER

Creates remote payment intents ("orders" in Razorpay terms).

Contract:
- create_payment_intent(amount, currency, receipt_id, metadata)
    -> {"gateway_order_id": ..., "raw_gateway_order": {...}}
- One outbound HTTPS call, bounded timeout, no local state.

Amount conversion:
- Razorpay takes integer minor units (paise for INR).
- major -> minor is amount × 100 rounded half-up to an integer.
  This is lossy and one-way: anything below half a paisa is dropped.

Failure mapping:
- timeout / connection error / HTTP 5xx      -> GatewayUnavailable
- HTTP 4xx / non-JSON / missing order id      -> GatewayRejected
"""

from __future__ import annotations

import base64
import json
import logging
import socket
import time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.conf import settings

from payments.exceptions import GatewayRejected, GatewayUnavailable, InvalidAmount

logger = logging.getLogger(__name__)

RAZORPAY_BASE = "https://api.razorpay.com/v1"
DEFAULT_CURRENCY = "INR"
DEFAULT_TIMEOUT_SECONDS = 15


def _razorpay_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = (payments.get("RAZORPAY") or {}) if isinstance(payments, dict) else {}
    return cfg if isinstance(cfg, dict) else {}


def get_key_id() -> str:
    """Public key id. Safe to hand to the storefront for checkout init."""
    return str(_razorpay_cfg().get("KEY_ID") or "").strip()


def get_key_secret() -> str:
    """Key secret. Doubles as the HMAC key for payment signatures."""
    secret = str(_razorpay_cfg().get("KEY_SECRET") or "").strip()
    if not secret:
        raise GatewayUnavailable("Payment gateway is not configured")
    return secret


def default_currency() -> str:
    return str(_razorpay_cfg().get("DEFAULT_CURRENCY") or DEFAULT_CURRENCY).strip().upper()


def _timeout_seconds() -> int:
    try:
        return int(_razorpay_cfg().get("TIMEOUT_SECONDS") or DEFAULT_TIMEOUT_SECONDS)
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT_SECONDS


def to_minor_units(amount) -> int:
    """
    Validate a major-unit amount and convert it to integer minor units.

    Raises InvalidAmount for non-numeric, non-finite, zero or negative
    input, and for amounts that round down to zero minor units.
    """
    if amount is None or amount == "" or isinstance(amount, bool):
        raise InvalidAmount()

    try:
        major = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidAmount() from exc

    if not major.is_finite() or major <= 0:
        raise InvalidAmount()

    minor = (major * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    if minor <= 0:
        raise InvalidAmount()

    return int(minor)


def generate_receipt_id() -> str:
    return f"receipt_{int(time.time() * 1000)}"


def _auth_header() -> str:
    key_id = get_key_id()
    key_secret = get_key_secret()
    if not key_id:
        raise GatewayUnavailable("Payment gateway is not configured")
    token = base64.b64encode(f"{key_id}:{key_secret}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def _safe_preview(text: str, limit: int = 500) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " …(truncated)"


def _gateway_message(raw: str) -> str:
    """Razorpay errors look like {"error": {"code": ..., "description": ...}}."""
    try:
        parsed = json.loads(raw or "")
    except ValueError:
        return _safe_preview(raw)

    if isinstance(parsed, dict):
        err = parsed.get("error")
        if isinstance(err, dict):
            return str(err.get("description") or err.get("code") or "").strip() or _safe_preview(raw)
        if err:
            return str(err)
    return _safe_preview(raw)


def _request_json(method: str, url: str, *, body: dict | None = None) -> dict[str, Any]:
    data = None
    if body is not None:
        data = json.dumps(body, ensure_ascii=False).encode("utf-8")

    req = Request(
        url,
        data=data,
        headers={
            "Authorization": _auth_header(),
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        method=method,
    )

    try:
        with urlopen(req, timeout=_timeout_seconds()) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        try:
            raw_err = e.read().decode("utf-8", errors="replace")
        except OSError:
            raw_err = ""
        message = _gateway_message(raw_err) or str(e.reason or "")
        logger.warning(
            "Razorpay HTTP error",
            extra={"status_code": e.code, "gateway_message": message},
        )
        if e.code >= 500:
            raise GatewayUnavailable(raw_message=message, status_code=e.code) from e
        raise GatewayRejected(raw_message=message, status_code=e.code) from e
    except (socket.timeout, TimeoutError) as e:
        logger.warning("Razorpay request timed out", extra={"url": url})
        raise GatewayUnavailable(raw_message=f"timeout: {e}") from e
    except URLError as e:
        logger.warning("Razorpay unreachable", extra={"reason": str(e.reason)})
        raise GatewayUnavailable(raw_message=str(e.reason)) from e

    try:
        parsed = json.loads(raw)
    except ValueError as e:
        raise GatewayRejected(raw_message=f"non-JSON response: {_safe_preview(raw)}") from e

    if not isinstance(parsed, dict):
        raise GatewayRejected(raw_message=f"unexpected response: {_safe_preview(raw)}")

    return parsed


def create_payment_intent(
    *,
    amount,
    currency: str | None = None,
    receipt_id: str | None = None,
    metadata: dict | None = None,
) -> dict:
    """
    Create a Razorpay order for `amount` (major units).

    Returns {"gateway_order_id", "raw_gateway_order", "amount_minor",
    "currency", "receipt"}.
    """
    amount_minor = to_minor_units(amount)
    currency = (currency or "").strip().upper() or default_currency()
    receipt = (receipt_id or "").strip() or generate_receipt_id()

    payload: dict = {
        "amount": amount_minor,
        "currency": currency,
        "receipt": receipt,
        "notes": dict(metadata or {}),
    }

    logger.info(
        "Creating Razorpay order",
        extra={"amount_minor": amount_minor, "currency": currency, "receipt": receipt},
    )

    raw_order = _request_json("POST", f"{RAZORPAY_BASE}/orders", body=payload)

    gateway_order_id = str(raw_order.get("id") or "").strip()
    if not gateway_order_id:
        raise GatewayRejected(raw_message=_safe_preview(json.dumps(raw_order)))

    logger.info(
        "Razorpay order created",
        extra={"gateway_order_id": gateway_order_id, "receipt": receipt},
    )

    return {
        "gateway_order_id": gateway_order_id,
        "raw_gateway_order": raw_order,
        "amount_minor": amount_minor,
        "currency": currency,
        "receipt": receipt,
    }
