"""Credential directory stored in Firestore.

The directory is a single pre-existing document in the ``LoginCredentials``
collection holding one map::

    {"<email>": [displayName, email, role, city], ...}

New entries are merged into that document. The existence check and the
merge run inside one Firestore transaction, so two concurrent provisioning
calls cannot both pass the check against the same snapshot.
"""
from __future__ import annotations
import logging
from typing import List

from firebase_admin import firestore
from google.api_core.exceptions import GoogleAPIError

from user_provisioning.core.exceptions import DirectoryNotFoundError, DuplicateEmailError
from .exceptions import DocumentStoreError

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "LoginCredentials"


def _add_entry(transaction, collection, email: str, entry: List[str]) -> str:
    """Check and merge ``email`` into the directory document within ``transaction``.

    Returns:
        ID of the directory document that was updated
    """
    snapshots = list(collection.limit(1).get(transaction=transaction))
    if not snapshots:
        raise DirectoryNotFoundError(collection.id)

    snapshot = snapshots[0]
    if email in (snapshot.to_dict() or {}):
        raise DuplicateEmailError(email)

    transaction.set(snapshot.reference, {email: entry}, merge=True)
    return snapshot.reference.id


class CredentialDirectory:
    """Email-keyed directory of provisioned users.

    Usage:
        directory = CredentialDirectory(firestore_client(app))
        directory.add_entry("ann@example.com", ["Ann", "ann@example.com", "admin", "CHENNAI"])
    """

    def __init__(self, db, collection_name: str = DEFAULT_COLLECTION):
        """Initialize directory.

        Args:
            db: Firestore client
            collection_name: Collection holding the directory document
        """
        self.db = db
        self.collection_name = collection_name

    @property
    def collection(self):
        return self.db.collection(self.collection_name)

    def add_entry(self, email: str, entry: List[str]) -> None:
        """Append a new key to the directory document.

        Raises:
            DirectoryNotFoundError: No directory document exists
            DuplicateEmailError: ``email`` is already present
            DocumentStoreError: Firestore call failed
        """
        transactional_add = firestore.transactional(_add_entry)
        try:
            doc_id = transactional_add(self.db.transaction(), self.collection, email, entry)
        except GoogleAPIError as exc:
            raise DocumentStoreError(f"Failed to update {self.collection_name}: {exc}") from exc

        logger.info("Added %s to %s/%s", email, self.collection_name, doc_id)

    def get_entries(self) -> dict:
        """Return the directory map.

        Raises:
            DirectoryNotFoundError: No directory document exists
            DocumentStoreError: Firestore call failed
        """
        try:
            snapshots = list(self.collection.limit(1).stream())
        except GoogleAPIError as exc:
            raise DocumentStoreError(f"Failed to read {self.collection_name}: {exc}") from exc

        if not snapshots:
            raise DirectoryNotFoundError(self.collection_name)
        return snapshots[0].to_dict() or {}
