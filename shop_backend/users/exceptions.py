# users/exceptions.py

"""
USER SERVICE ERRORS

Centralized domain errors for registration and back-office user
management.
"""

from __future__ import annotations


# ---------------- REGISTRATION ----------------
class RegistrationError(Exception):
    """Base exception for registration failures."""

    default_message = "Registration failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class EmailAlreadyRegistered(RegistrationError):
    default_message = "Existing user found with the same email address"


class InvalidVerificationCode(RegistrationError):
    default_message = "Invalid verification code"


class VerificationExpired(RegistrationError):
    default_message = "Invalid or expired verification code"


class TooManyAttempts(RegistrationError):
    default_message = "Too many attempts. Request a new code."


# ---------------- USER DIRECTORY ----------------
class UserDirectoryError(Exception):
    """Base exception for back-office user management failures."""

    default_message = "User management error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UserNotFound(UserDirectoryError):
    default_message = "User not found"


class CannotModifyOwnAccount(UserDirectoryError):
    """An admin tried to deactivate or delete the account they are using."""

    default_message = "You cannot deactivate or delete your own account"


class UserHasOrders(UserDirectoryError):
    """Orders keep their buyer; such accounts are deactivated, not deleted."""

    default_message = "User has orders and cannot be deleted; deactivate the account instead"
