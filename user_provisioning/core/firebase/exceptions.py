"""Firebase-specific exceptions for error handling."""


class FirebaseIntegrationError(Exception):
    """Base exception for all Firebase operations."""
    pass


class FirebaseConfigError(FirebaseIntegrationError):
    """Firebase app could not be initialized (missing or unreadable credentials)."""
    pass


class IdentityServiceError(FirebaseIntegrationError):
    """Error returned by Firebase Authentication.

    Attributes:
        code: Firebase error code when available (e.g. ``ALREADY_EXISTS``)
        message: Error message from the service
    """

    def __init__(self, message: str, code: str | None = None):
        self.code = code
        self.message = message
        super().__init__(message)


class DocumentStoreError(FirebaseIntegrationError):
    """Firestore read or write failed."""
    pass
