"""Firebase Authentication user operations."""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Optional, List, Tuple

from firebase_admin import auth
from firebase_admin.exceptions import FirebaseError

from .exceptions import IdentityServiceError

logger = logging.getLogger(__name__)

# Firebase caps list_users at 1000 results per page
MAX_PAGE_SIZE = 1000


@dataclass(frozen=True)
class IdentityRecord:
    """Subset of a Firebase user record used by the API.

    Timestamps are milliseconds since the epoch (UTC), as Firebase reports them;
    ``None`` when the user never signed in.
    """
    uid: str
    email: Optional[str]
    display_name: Optional[str] = None
    provider_ids: List[str] = field(default_factory=list)
    created_at: Optional[int] = None
    last_sign_in_at: Optional[int] = None

    @classmethod
    def from_user_record(cls, user) -> "IdentityRecord":
        metadata = user.user_metadata
        return cls(
            uid=user.uid,
            email=user.email,
            display_name=user.display_name,
            provider_ids=[info.provider_id for info in (user.provider_data or [])],
            created_at=metadata.creation_timestamp if metadata else None,
            last_sign_in_at=metadata.last_sign_in_timestamp if metadata else None,
        )


class IdentityService:
    """Service for Firebase Authentication accounts.

    Usage:
        app = initialize_firebase_app("serviceAccountKey.json")
        identity = IdentityService(app)
        records, next_token = identity.list_users_page(max_results=200)
    """

    def __init__(self, app=None):
        """Initialize identity service.

        Args:
            app: Firebase app to bind calls to (default app when None)
        """
        self.app = app

    def list_users_page(
        self,
        page_token: Optional[str] = None,
        max_results: int = 200,
    ) -> Tuple[List[IdentityRecord], Optional[str]]:
        """Fetch one page of users.

        Args:
            page_token: Continuation token from the previous page, or None for the first page
            max_results: Page size (1-1000)

        Returns:
            Tuple of (records in service order, next page token or None)

        Raises:
            IdentityServiceError: If the page fetch fails
        """
        try:
            page = auth.list_users(page_token=page_token, max_results=max_results, app=self.app)
        except (FirebaseError, ValueError) as exc:
            raise IdentityServiceError(str(exc), getattr(exc, "code", None)) from exc

        records = [IdentityRecord.from_user_record(user) for user in page.users]
        return records, page.next_page_token or None

    def create_user(self, email: str, password: str, display_name: str) -> IdentityRecord:
        """Create a new account with a verified email.

        Raises:
            IdentityServiceError: If Firebase rejects the account (e.g. duplicate email)
        """
        try:
            user = auth.create_user(
                email=email,
                password=password,
                display_name=display_name,
                email_verified=True,
                app=self.app,
            )
        except (FirebaseError, ValueError) as exc:
            logger.warning("Firebase rejected account for %s: %s", email, exc)
            raise IdentityServiceError(str(exc), getattr(exc, "code", None)) from exc

        logger.info("Created Firebase account %s for %s", user.uid, email)
        return IdentityRecord.from_user_record(user)
