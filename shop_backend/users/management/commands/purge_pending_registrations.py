# users/management/commands/purge_pending_registrations.py

from __future__ import annotations

from django.core.management.base import BaseCommand

from users.services.registration import purge_expired_registrations


class Command(BaseCommand):
    help = "Delete pending sign-ups whose verification code has expired."

    def handle(self, *args, **options):
        deleted = purge_expired_registrations()
        self.stdout.write(self.style.SUCCESS(f"Purged {deleted} expired pending registration(s)"))
