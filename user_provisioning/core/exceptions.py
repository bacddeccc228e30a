"""Provisioning errors surfaced to API clients.

Every error carries the HTTP status it maps to and a ``to_dict()`` body, so
route handlers can re-raise them and let the blueprint error handler render
the response.
"""
from __future__ import annotations

from typing import Iterable


class ProvisioningError(Exception):
    """Base error for user listing and provisioning operations."""

    status = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(ProvisioningError):
    """Payload failed one or more field constraints.

    Attributes:
        errors: One message per violated constraint, in field order
    """

    def __init__(self, errors: Iterable[str]):
        self.errors = list(errors)
        super().__init__("Validation failed")

    def to_dict(self) -> dict:
        return {"message": self.message, "errors": self.errors}


class DirectoryNotFoundError(ProvisioningError):
    """The credential directory document does not exist."""

    def __init__(self, collection: str = "LoginCredentials"):
        self.collection = collection
        super().__init__(f"No document found in {collection}")


class DuplicateEmailError(ProvisioningError):
    """Email is already a key in the credential directory."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} already exists")


class UserCreationError(ProvisioningError):
    """Identity service rejected the account creation."""
    pass


class UserListingError(ProvisioningError):
    """A page fetch failed while listing identity service users."""

    status = 500

    def to_dict(self) -> dict:
        return {"error": self.message}
