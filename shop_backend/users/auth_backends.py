"""
PATH: users/auth_backends.py

AUTH BACKEND: email + password

Used by Django authenticate() (login view, Django admin).
Email lookup is case-insensitive; inactive users never authenticate.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import BaseBackend

User = get_user_model()


class EmailBackend(BaseBackend):
    def authenticate(self, request, username=None, password=None, **kwargs):
        # Django admin passes the identifier as "username"
        identifier = (kwargs.get("email") or username or "").strip()
        if not identifier or password is None:
            return None

        try:
            user = User.objects.get(email__iexact=identifier)
        except User.DoesNotExist:
            # Burn a hash so timing doesn't reveal which emails exist.
            User().set_password(password)
            return None

        if not user.is_active:
            return None

        if user.check_password(password):
            return user

        return None

    def get_user(self, user_id):
        try:
            return User.objects.get(pk=user_id)
        except User.DoesNotExist:
            return None
