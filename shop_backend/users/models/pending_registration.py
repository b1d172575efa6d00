# users/models/pending_registration.py

"""
PENDING REGISTRATION (EMAIL VERIFICATION HOLD)

A sign-up waits here until the emailed code is confirmed.

Rules:
- One row per email (re-registering refreshes code + expiry).
- Code and password are stored hashed (Django password hashers).
- Rows past expires_at are dead: verification refuses them and
  `manage.py purge_pending_registrations` deletes them.
- Lives in the database so it survives restarts and is shared by every
  app server.
"""

from __future__ import annotations

import uuid

from django.db import models
from django.utils import timezone


class PendingRegistrationQuerySet(models.QuerySet):
    def live(self):
        return self.filter(expires_at__gt=timezone.now())

    def expired(self):
        return self.filter(expires_at__lte=timezone.now())


class PendingRegistration(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150, blank=True)

    password_hash = models.CharField(max_length=256)
    code_hash = models.CharField(max_length=256)

    attempts = models.PositiveSmallIntegerField(default=0)
    expires_at = models.DateTimeField(db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PendingRegistrationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]

    @property
    def is_expired(self) -> bool:
        return self.expires_at <= timezone.now()

    def __str__(self):
        return f"{self.email} | expires {self.expires_at:%Y-%m-%d %H:%M}"
