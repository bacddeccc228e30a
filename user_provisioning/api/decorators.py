"""
Flask decorators for API authentication.

Protected routes require a static shared secret presented as an RFC 6750
Bearer token:

    Authorization: Bearer <token>

Security:
- Constant-time comparison (hmac.compare_digest)
- Only a truncated SHA-256 hash of the presented token is ever logged
"""

import hashlib
import hmac
import logging
from functools import wraps

from flask import current_app, g, jsonify, request

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def _token_fingerprint(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:12]


def _log_auth_attempt(token: str, success: bool) -> None:
    """Log authentication attempt without leaking the token."""
    client_ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    status = "SUCCESS" if success else "FAILED"
    logger.info(
        f"{status} bearer auth | token_hash={_token_fingerprint(token)} | "
        f"path={request.path} | client_ip={client_ip}"
    )


def validate_static_token(provided_token: str) -> bool:
    """Compare ``provided_token`` with the configured API token in constant time."""
    cfg = current_app.config.get("APP_CONFIG")
    expected_token = getattr(cfg, "api_token", "") if cfg else ""
    if not expected_token:
        return False
    return hmac.compare_digest(provided_token.encode("utf-8"), expected_token.encode("utf-8"))


def require_bearer_token(fn):
    """
    Decorator requiring the static API Bearer token.

    Returns:
        Decorated view that runs only when the token matches

    Responses:
        401 Unauthorized: Header missing, not a Bearer scheme, or empty token
        403 Forbidden: Token does not match the configured secret

    Example:
        @bp.route("/auth-users")
        @require_bearer_token
        def list_auth_users():
            ...
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        auth_header = request.headers.get("Authorization", "")

        if not auth_header.startswith(BEARER_PREFIX):
            logger.warning(f"Request to {request.path} without Bearer token")
            return jsonify({"message": "Unauthorized: Missing Bearer token"}), 401

        token = auth_header[len(BEARER_PREFIX):]
        if not token:
            logger.warning(f"Request to {request.path} with empty Bearer token")
            return jsonify({"message": "Unauthorized: Missing Bearer token"}), 401

        if not validate_static_token(token):
            _log_auth_attempt(token, success=False)
            return jsonify({"message": "Forbidden: Invalid token"}), 403

        _log_auth_attempt(token, success=True)
        g.auth_method = "static"
        return fn(*args, **kwargs)

    return wrapper
