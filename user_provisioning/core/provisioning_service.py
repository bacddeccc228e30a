"""
Provisioning Service Layer

Business logic behind the HTTP API and the operator CLI:

    HTTP API (/auth-users, /create-user) ──┐
                                          ├──> provisioning_service.py ──> core.firebase ──> Firebase
    CLI (scripts/provision.py) ───────────┘

Features:
    - Full user listing across identity service pages
    - Two-step provisioning: identity account, then credential directory entry
    - Audit trail for every provisioning attempt
    - Standardized errors via ProvisioningError subclasses

Collaborators (identity service, credential directory) are passed in at
construction so tests can substitute in-memory fakes.
"""

from __future__ import annotations
import logging
from typing import Any, Optional

from user_provisioning.core import audit
from user_provisioning.core.exceptions import (
    ProvisioningError,
    UserCreationError,
    UserListingError,
)
from user_provisioning.core.firebase import (
    DocumentStoreError,
    IdentityRecord,
    IdentityServiceError,
)
from user_provisioning.core.timefmt import format_ist_date

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 200


# ─────────────────────────────────────────────────────────────────────────────
# Listing
# ─────────────────────────────────────────────────────────────────────────────

def project_user(record: IdentityRecord) -> dict[str, Any]:
    """Project an identity record into the ``/auth-users`` response shape."""
    return {
        "uid": record.uid,
        "email": record.email,
        "providers": list(record.provider_ids),
        "createdAt": format_ist_date(record.created_at),
        "lastLogin": format_ist_date(record.last_sign_in_at),
    }


class UserLister:
    """Lists every identity service user, following continuation tokens."""

    def __init__(self, identity, page_size: int = DEFAULT_PAGE_SIZE):
        self.identity = identity
        self.page_size = page_size

    def list_users(self) -> dict[str, Any]:
        """Return ``{"total": n, "users": [...]}`` in service order.

        Raises:
            UserListingError: If any page fetch fails (partial results are discarded)
        """
        users: list[dict[str, Any]] = []
        page_token: Optional[str] = None
        pages = 0

        while True:
            try:
                records, page_token = self.identity.list_users_page(page_token, self.page_size)
            except IdentityServiceError as exc:
                logger.error("User listing aborted on page %d: %s", pages + 1, exc)
                raise UserListingError(str(exc)) from exc

            pages += 1
            users.extend(project_user(record) for record in records)
            if not page_token:
                break

        logger.debug("Listed %d users across %d pages", len(users), pages)
        return {"total": len(users), "users": users}


# ─────────────────────────────────────────────────────────────────────────────
# Provisioning
# ─────────────────────────────────────────────────────────────────────────────

class UserProvisioner:
    """Creates an identity service account and records it in the credential directory.

    The two steps are not transactional: if the directory update fails, the
    account created in step one is left in place.
    """

    def __init__(self, identity, directory, operator: str = "api"):
        self.identity = identity
        self.directory = directory
        self.operator = operator

    def provision(self, payload: dict[str, str], operator: Optional[str] = None) -> dict[str, Any]:
        """Provision a user from a validated create-user payload.

        Args:
            payload: Output of validate_create_user_payload()
            operator: Audit operator override

        Returns:
            ``{uid, email, displayName, Role, City}`` of the created user

        Raises:
            UserCreationError: Identity service rejected the account
            DirectoryNotFoundError: Directory document is missing
            DuplicateEmailError: Email already present in the directory
            ProvisioningError: Directory update failed for another reason
        """
        operator = operator or self.operator
        email = payload["email"]
        display_name = payload["displayName"]
        role = payload["Role"]
        city = payload["City"]
        audit_details = {"display_name": display_name, "role": role, "city": city}

        try:
            record = self.identity.create_user(email, payload["password"], display_name)
        except IdentityServiceError as exc:
            audit.safe_log_provisioning_event(
                "create_user",
                email,
                operator=operator,
                details={**audit_details, "stage": "identity", "error": str(exc)},
                success=False,
            )
            raise UserCreationError(str(exc)) from exc

        try:
            self.directory.add_entry(email, [display_name, email, role, city])
        except (ProvisioningError, DocumentStoreError) as exc:
            logger.warning(
                "Directory update failed for %s; identity account %s was kept: %s",
                email, record.uid, exc,
            )
            audit.safe_log_provisioning_event(
                "create_user",
                email,
                operator=operator,
                details={**audit_details, "uid": record.uid, "stage": "directory", "error": str(exc)},
                success=False,
            )
            if isinstance(exc, ProvisioningError):
                raise
            raise ProvisioningError(str(exc)) from exc

        audit.safe_log_provisioning_event(
            "create_user",
            email,
            operator=operator,
            details={**audit_details, "uid": record.uid},
            success=True,
        )
        logger.info("Provisioned %s (uid=%s, role=%s, city=%s)", email, record.uid, role, city)

        return {
            "uid": record.uid,
            "email": record.email,
            "displayName": record.display_name,
            "Role": role,
            "City": city,
        }
