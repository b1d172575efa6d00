# users/models/__init__.py

from .pending_registration import PendingRegistration
from .user import User

__all__ = [
    "User",
    "PendingRegistration",
]
