"""Firebase client library.

This package wraps the two Firebase products the API depends on:

- client.py: Firebase app bootstrap from a service-account key
- users.py: Firebase Authentication accounts (list, create)
- directory.py: Firestore credential directory (email -> profile tuple)
- exceptions.py: Typed exceptions for error handling

Usage:
    from user_provisioning.core.firebase import (
        initialize_firebase_app, firestore_client, IdentityService, CredentialDirectory,
    )

    app = initialize_firebase_app("serviceAccountKey.json")
    identity = IdentityService(app)
    directory = CredentialDirectory(firestore_client(app))
"""
from .client import (
    DEFAULT_APP_NAME,
    initialize_firebase_app,
    firestore_client,
)
from .exceptions import (
    FirebaseIntegrationError,
    FirebaseConfigError,
    IdentityServiceError,
    DocumentStoreError,
)
from .users import (
    MAX_PAGE_SIZE,
    IdentityRecord,
    IdentityService,
)
from .directory import (
    DEFAULT_COLLECTION,
    CredentialDirectory,
)

__all__ = [
    # Client
    "DEFAULT_APP_NAME",
    "initialize_firebase_app",
    "firestore_client",

    # Exceptions
    "FirebaseIntegrationError",
    "FirebaseConfigError",
    "IdentityServiceError",
    "DocumentStoreError",

    # Services
    "MAX_PAGE_SIZE",
    "IdentityRecord",
    "IdentityService",
    "DEFAULT_COLLECTION",
    "CredentialDirectory",
]
