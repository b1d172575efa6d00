# users/management/commands/ensure_admin.py

"""
PATH: users/management/commands/ensure_admin.py

Production-safe admin bootstrap.

- Reads AUTO_ADMIN_EMAIL + AUTO_ADMIN_PASSWORD from env.
- Idempotent: creates the admin if missing; resets password and restores
  role, staff flag and capability flags if the user exists.
- --superuser also grants Django superuser (admin site).
- Never prints the password.
"""

from __future__ import annotations

import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from permissions.roles import CAPABILITY_FLAGS, ROLE_ADMIN


class Command(BaseCommand):
    help = "Create/update the back-office admin from env vars (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--superuser",
            action="store_true",
            help="Also grant Django superuser access.",
        )

    def handle(self, *args, **options):
        email = (os.environ.get("AUTO_ADMIN_EMAIL") or "").strip()
        password = (os.environ.get("AUTO_ADMIN_PASSWORD") or "").strip()

        if not email or not password:
            self.stdout.write(self.style.WARNING("AUTO_ADMIN_* env vars not set. Skipping."))
            return

        User = get_user_model()
        superuser = bool(options.get("superuser"))

        with transaction.atomic():
            user = User.objects.filter(email__iexact=email).first()

            if user:
                user.role = ROLE_ADMIN
                user.is_active = True
                user.is_staff = True
                if superuser:
                    user.is_superuser = True
                for flag in CAPABILITY_FLAGS.values():
                    setattr(user, flag, True)
                user.set_password(password)
                user.save()
                self.stdout.write(self.style.SUCCESS(f"Admin ensured: {email} (updated)"))
                return

            if superuser:
                User.objects.create_superuser(email=email, password=password)
            else:
                User.objects.create_admin(email=email, password=password)

        self.stdout.write(self.style.SUCCESS(f"Admin ensured: {email} (created)"))
