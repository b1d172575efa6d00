# users/services/registration.py

"""
REGISTRATION WITH EMAIL VERIFICATION

Flow:
1) start_registration(email, password, name)
   - rejects emails that already belong to a user
   - upserts PendingRegistration with fresh code + expiry
   - emails the plain 6-digit code
2) confirm_registration(email, code)
   - refuses unknown / expired / over-attempted holds
   - creates the User with the password hash captured at step 1
   - deletes the hold

Nothing here keeps state in process memory.
"""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.core.mail import send_mail
from django.db import transaction
from django.utils import timezone

from users.exceptions import (
    EmailAlreadyRegistered,
    InvalidVerificationCode,
    RegistrationError,
    TooManyAttempts,
    VerificationExpired,
)
from users.models import PendingRegistration, User

logger = logging.getLogger(__name__)

CODE_DIGITS = 6


def generate_verification_code() -> str:
    return f"{secrets.randbelow(10 ** CODE_DIGITS):0{CODE_DIGITS}d}"


def _code_ttl() -> timedelta:
    return timedelta(minutes=int(getattr(settings, "REGISTRATION_CODE_TTL_MINUTES", 30)))


def _max_attempts() -> int:
    return int(getattr(settings, "REGISTRATION_MAX_ATTEMPTS", 5))


def send_verification_email(*, email: str, name: str, code: str) -> None:
    minutes = int(_code_ttl().total_seconds() // 60)
    greeting = f"Hi {name}," if name else "Hi,"
    send_mail(
        subject="Your verification code",
        message=(
            f"{greeting}\n\n"
            f"Your verification code is {code}. It expires in {minutes} minutes.\n\n"
            "If you did not try to create an account, ignore this email."
        ),
        from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
        recipient_list=[email],
        fail_silently=False,
    )


@transaction.atomic
def start_registration(*, email: str, password: str, name: str = "") -> PendingRegistration:
    email = User.objects.normalize_email(email).strip()

    if User.objects.filter(email__iexact=email).exists():
        raise EmailAlreadyRegistered("Existing user found with the same email address")

    code = generate_verification_code()

    pending, created = PendingRegistration.objects.update_or_create(
        email=email,
        defaults={
            "name": (name or "").strip(),
            "password_hash": make_password(password),
            "code_hash": make_password(code),
            "attempts": 0,
            "expires_at": timezone.now() + _code_ttl(),
        },
    )

    send_verification_email(email=email, name=pending.name, code=code)

    logger.info(
        "Verification code issued",
        extra={"email": email, "refreshed": not created},
    )
    return pending


def confirm_registration(*, email: str, code: str) -> User:
    email = User.objects.normalize_email(email).strip()

    # Failures are raised after the block commits so that attempt counters
    # and expired-row deletes are kept.
    error: RegistrationError | None = None
    user = None

    with transaction.atomic():
        pending = (
            PendingRegistration.objects.select_for_update()
            .filter(email__iexact=email)
            .first()
        )

        if not pending:
            error = InvalidVerificationCode("Invalid or expired verification code")

        elif pending.is_expired:
            pending.delete()
            error = VerificationExpired("Invalid or expired verification code")

        elif pending.attempts >= _max_attempts():
            error = TooManyAttempts("Too many attempts. Request a new code.")

        elif not check_password(str(code or "").strip(), pending.code_hash):
            pending.attempts += 1
            pending.save(update_fields=["attempts", "updated_at"])
            logger.warning(
                "Wrong verification code",
                extra={"email": email, "attempts": pending.attempts},
            )
            error = InvalidVerificationCode("Invalid verification code")

        elif User.objects.filter(email__iexact=email).exists():
            pending.delete()
            error = EmailAlreadyRegistered("Existing user found with the same email address")

        else:
            user = User.objects.create_user(email=pending.email, name=pending.name)
            user.password = pending.password_hash
            user.save(update_fields=["password"])
            pending.delete()

    if error is not None:
        raise error

    logger.info("User registered", extra={"user_id": str(user.id)})
    return user


def purge_expired_registrations() -> int:
    deleted, _ = PendingRegistration.objects.expired().delete()
    return deleted
