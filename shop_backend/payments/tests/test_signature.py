# payments/tests/test_signature.py

import hashlib
import hmac

from django.test import SimpleTestCase

from payments.exceptions import MissingParameter
from payments.services.signature import compute_payment_signature, verify_payment_signature

SECRET = "test_key_secret"


def _sign(order_id, payment_id, secret=SECRET):
    return hmac.new(
        secret.encode("utf-8"),
        f"{order_id}|{payment_id}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


class PaymentSignatureTests(SimpleTestCase):
    """
    GUARANTEES:
    - Only hex(HMAC_SHA256(secret, "order|payment")) verifies
    - Any altered input fails
    - Missing parameters are reported by name, before any HMAC work
    """

    def test_compute_matches_reference_hmac(self):
        self.assertEqual(
            compute_payment_signature(order_id="order_A", payment_id="pay_B", secret=SECRET),
            _sign("order_A", "pay_B"),
        )

    def test_valid_signature_verifies(self):
        self.assertTrue(
            verify_payment_signature(
                order_id="order_A",
                payment_id="pay_B",
                signature=_sign("order_A", "pay_B"),
                secret=SECRET,
            )
        )

    def test_single_altered_character_fails(self):
        good = _sign("order_A", "pay_B")
        bad = ("0" if good[0] != "0" else "1") + good[1:]

        self.assertFalse(
            verify_payment_signature(order_id="order_A", payment_id="pay_B", signature=bad, secret=SECRET)
        )

    def test_swapped_ids_fail(self):
        self.assertFalse(
            verify_payment_signature(
                order_id="pay_B",
                payment_id="order_A",
                signature=_sign("order_A", "pay_B"),
                secret=SECRET,
            )
        )

    def test_wrong_secret_fails(self):
        self.assertFalse(
            verify_payment_signature(
                order_id="order_A",
                payment_id="pay_B",
                signature=_sign("order_A", "pay_B", secret="other"),
                secret=SECRET,
            )
        )

    def test_comparison_is_case_sensitive(self):
        upper = _sign("order_A", "pay_B").upper()
        self.assertFalse(
            verify_payment_signature(order_id="order_A", payment_id="pay_B", signature=upper, secret=SECRET)
        )

    def test_non_ascii_signature_is_rejected_not_raised(self):
        self.assertFalse(
            verify_payment_signature(order_id="order_A", payment_id="pay_B", signature="é" * 64, secret=SECRET)
        )

    def test_empty_secret_never_verifies(self):
        self.assertFalse(
            verify_payment_signature(
                order_id="order_A",
                payment_id="pay_B",
                signature=_sign("order_A", "pay_B", secret=""),
                secret="",
            )
        )

    def test_missing_parameters_are_listed(self):
        with self.assertRaises(MissingParameter) as ctx:
            verify_payment_signature(order_id="", payment_id="pay_B", signature="  ", secret=SECRET)

        self.assertEqual(ctx.exception.names, ["order_id", "signature"])
        self.assertIn("order_id", ctx.exception.message)

    def test_padded_signature_fails(self):
        self.assertFalse(
            verify_payment_signature(
                order_id="order_A",
                payment_id="pay_B",
                signature=_sign("order_A", "pay_B") + "  ",
                secret=SECRET,
            )
        )

    def test_ids_are_hashed_verbatim(self):
        self.assertTrue(
            verify_payment_signature(
                order_id="order_A ",
                payment_id="pay_B",
                signature=_sign("order_A ", "pay_B"),
                secret=SECRET,
            )
        )
        self.assertFalse(
            verify_payment_signature(
                order_id="order_A ",
                payment_id="pay_B",
                signature=_sign("order_A", "pay_B"),
                secret=SECRET,
            )
        )

    def test_whitespace_only_values_are_missing(self):
        with self.assertRaises(MissingParameter) as ctx:
            verify_payment_signature(order_id="order_A", payment_id="   ", signature="\t", secret=SECRET)

        self.assertEqual(ctx.exception.names, ["payment_id", "signature"])
