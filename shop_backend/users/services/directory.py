# users/services/directory.py

"""
USER DIRECTORY (BACK-OFFICE APPLICATION SERVICE)

Read and manage storefront accounts on behalf of an admin holding the
users.manage capability.

Hard rules:
- An admin can never deactivate or delete the account making the call.
- Accounts that own orders are never hard-deleted (orders keep their
  buyer); deactivation is the way to block them.
- A missing user is UserNotFound; nothing is written.
"""

from __future__ import annotations

import logging
import math
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, ProtectedError, Q
from django.utils import timezone

from users.exceptions import CannotModifyOwnAccount, UserHasOrders, UserNotFound
from users.models import User

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_STATS_WINDOW_DAYS = 30


def _positive_int(value, default: int) -> int:
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return n if n > 0 else default


def _lookup(user_id, *, for_update: bool = False) -> User:
    qs = User.objects.all()
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=user_id)
    except (User.DoesNotExist, ValidationError, ValueError, TypeError):
        raise UserNotFound() from None


def _is_self(user: User, acting_user) -> bool:
    return acting_user is not None and getattr(acting_user, "pk", None) == user.pk


# ============================================================
# Queries
# ============================================================


def get_user(user_id) -> User:
    return _lookup(user_id)


def list_users(
    *,
    search=None,
    is_active=None,
    role=None,
    page=DEFAULT_PAGE,
    page_size=DEFAULT_PAGE_SIZE,
) -> dict:
    page = _positive_int(page, DEFAULT_PAGE)
    page_size = min(_positive_int(page_size, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)

    qs = User.objects.all()

    term = str(search or "").strip()
    if term:
        qs = qs.filter(Q(name__icontains=term) | Q(email__icontains=term))

    if is_active is not None:
        qs = qs.filter(is_active=is_active)

    if role:
        qs = qs.filter(role=role)

    qs = qs.order_by("-created_at", "-id")

    total_count = qs.count()
    skip = (page - 1) * page_size

    return {
        "items": list(qs[skip : skip + page_size]),
        "total_count": total_count,
        "page": page,
        "page_size": page_size,
        "pages": math.ceil(total_count / page_size) if total_count else 0,
    }


def user_statistics(window_days=DEFAULT_STATS_WINDOW_DAYS, *, now=None) -> dict:
    window_days = _positive_int(window_days, DEFAULT_STATS_WINDOW_DAYS)
    now = now or timezone.now()
    since = now - timedelta(days=window_days)

    totals = User.objects.aggregate(
        total_users=Count("id"),
        active_users=Count("id", filter=Q(is_active=True)),
        admins=Count("id", filter=Q(role=User.ROLE_ADMIN)),
        new_users=Count("id", filter=Q(created_at__gte=since)),
    )

    total = totals["total_users"] or 0
    active = totals["active_users"] or 0
    admins = totals["admins"] or 0

    return {
        "total_users": total,
        "active_users": active,
        "inactive_users": total - active,
        "admins": admins,
        "customers": total - admins,
        "new_users": totals["new_users"] or 0,
        "window_days": window_days,
    }


# ============================================================
# Commands
# ============================================================


def set_user_status(user_id, *, is_active: bool, acting_user=None) -> User:
    with transaction.atomic():
        user = _lookup(user_id, for_update=True)

        if not is_active and _is_self(user, acting_user):
            raise CannotModifyOwnAccount()

        previous = user.is_active
        if previous != is_active:
            user.is_active = is_active
            user.save(update_fields=["is_active", "updated_at"])

    logger.info(
        "User status updated",
        extra={
            "user_id": str(user.id),
            "from": previous,
            "to": is_active,
            "by": str(getattr(acting_user, "pk", "") or ""),
        },
    )
    return user


def delete_user(user_id, *, acting_user=None) -> None:
    with transaction.atomic():
        user = _lookup(user_id, for_update=True)

        if _is_self(user, acting_user):
            raise CannotModifyOwnAccount()

        if user.orders.exists():
            raise UserHasOrders()

        try:
            user.delete()
        except ProtectedError:
            raise UserHasOrders() from None

    logger.warning(
        "User deleted",
        extra={"user_id": str(user_id), "by": str(getattr(acting_user, "pk", "") or "")},
    )
