"""Firebase app bootstrap.

Initializes a named Firebase app from a service-account certificate and hands
out the Firestore client bound to it. Callers keep the returned app and pass
it explicitly to the identity and directory services.
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

from .exceptions import FirebaseConfigError

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "user-provisioning"


def initialize_firebase_app(
    credentials_path: str,
    project_id: Optional[str] = None,
    name: str = DEFAULT_APP_NAME,
) -> firebase_admin.App:
    """Return the named Firebase app, initializing it on first use.

    Args:
        credentials_path: Path to the service-account JSON key
        project_id: Optional project override (defaults to the key's project)
        name: Firebase app name

    Returns:
        Initialized firebase_admin.App

    Raises:
        FirebaseConfigError: If the key file is missing or invalid
    """
    try:
        return firebase_admin.get_app(name)
    except ValueError:
        pass

    key_path = Path(credentials_path)
    if not key_path.is_file():
        raise FirebaseConfigError(f"Service account key not found: {key_path}")

    try:
        cert = credentials.Certificate(str(key_path))
    except (ValueError, OSError) as exc:
        raise FirebaseConfigError(f"Invalid service account key {key_path}: {exc}") from exc

    options = {"projectId": project_id} if project_id else None
    app = firebase_admin.initialize_app(cert, options, name=name)
    logger.info("Initialized Firebase app '%s' (project=%s)", name, app.project_id or "from key")
    return app


def firestore_client(app: firebase_admin.App):
    """Firestore client bound to ``app``."""
    return firestore.client(app)
