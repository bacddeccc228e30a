"""User listing and provisioning endpoints.

Both routes require the static Bearer token (see decorators.require_bearer_token)
and delegate all business logic to core.provisioning_service.
"""

from __future__ import annotations
import logging

from flask import Blueprint, current_app, jsonify, request

from user_provisioning.api.decorators import require_bearer_token
from user_provisioning.core.exceptions import ProvisioningError
from user_provisioning.core.validators import validate_create_user_payload

bp = Blueprint("users", __name__)

logger = logging.getLogger(__name__)


@bp.errorhandler(ProvisioningError)
def handle_provisioning_error(error: ProvisioningError):
    """Render ProvisioningError subclasses with their own status and body."""
    return jsonify(error.to_dict()), error.status


@bp.route("/auth-users", methods=["GET"])
@require_bearer_token
def list_auth_users():
    """List every identity service user.

    Returns:
        200 with ``{total, users: [{uid, email, providers, createdAt, lastLogin}]}``
        500 with ``{error}`` if the identity service fails
    """
    lister = current_app.extensions["user_lister"]
    try:
        return jsonify(lister.list_users()), 200
    except ProvisioningError:
        raise
    except Exception as exc:
        logger.exception("Listing users failed")
        return jsonify({"error": str(exc)}), 500


@bp.route("/create-user", methods=["POST"])
@require_bearer_token
def create_user():
    """Create an identity account and its credential directory entry.

    Body: ``{email, password, displayName, Role, City}``

    Returns:
        201 with ``{message, user: {uid, email, displayName, Role, City}}``
        400 with ``{message: "Validation failed", errors}`` on invalid payload
        400 with ``{message}`` on any other failure
    """
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}

    provisioner = current_app.extensions["user_provisioner"]
    try:
        value = validate_create_user_payload(payload)
        user = provisioner.provision(value)
    except ProvisioningError:
        raise
    except Exception as exc:
        logger.exception("User creation failed")
        return jsonify({"message": str(exc)}), 400

    return jsonify({"message": "User created successfully", "user": user}), 201
