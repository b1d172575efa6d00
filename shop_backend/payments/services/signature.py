# payments/services/signature.py

"""
PAYMENT SIGNATURE VERIFIER

The single trust boundary of checkout: a payment confirmation coming back
from the browser is honoured only if its signature matches

    hex(HMAC_SHA256(key_secret, f"{order_id}|{payment_id}"))

Rules:
- Pure. No I/O, no settings access, deterministic.
- Empty or blank order_id / payment_id / signature -> MissingParameter,
  raised before any HMAC work.
- Values are hashed and compared exactly as received (no trimming).
- Exact, case-sensitive comparison via hmac.compare_digest.
- The shared secret is server-side configuration only. Anyone holding it
  can mint valid signatures.
"""

from __future__ import annotations

import hashlib
import hmac

from payments.exceptions import MissingParameter


def _as_str(value) -> str:
    if value is None:
        return ""
    return str(value)


def missing_signature_parameters(*, order_id, payment_id, signature) -> list[str]:
    return [
        name
        for name, value in (
            ("order_id", order_id),
            ("payment_id", payment_id),
            ("signature", signature),
        )
        if not _as_str(value).strip()
    ]


def compute_payment_signature(*, order_id: str, payment_id: str, secret: str) -> str:
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_payment_signature(
    *,
    order_id: str,
    payment_id: str,
    signature: str,
    secret: str,
) -> bool:
    missing = missing_signature_parameters(
        order_id=order_id,
        payment_id=payment_id,
        signature=signature,
    )
    if missing:
        raise MissingParameter(missing)

    if not secret:
        return False

    expected = compute_payment_signature(
        order_id=_as_str(order_id),
        payment_id=_as_str(payment_id),
        secret=secret,
    )
    # bytes: compare_digest rejects non-ASCII str input
    return hmac.compare_digest(expected.encode("ascii"), _as_str(signature).encode("utf-8"))
