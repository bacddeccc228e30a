"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with its blueprints, middleware, and services.

Gunicorn loads the app through the factory (see gunicorn.conf.py):
    gunicorn "user_provisioning.flask_app:create_app()"
"""
from __future__ import annotations

from flask import Flask, request

from user_provisioning.config import AppConfig, load_settings
from user_provisioning.core.firebase import (
    CredentialDirectory,
    IdentityService,
    firestore_client,
    initialize_firebase_app,
)
from user_provisioning.core.provisioning_service import UserLister, UserProvisioner


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: AppConfig | None = None, identity=None, directory=None) -> Flask:
    """Create and configure Flask application.

    Args:
        cfg: Settings (loaded from the environment when omitted)
        identity: Identity service (Firebase Authentication when omitted)
        directory: Credential directory (Firestore when omitted)
    """
    if cfg is None:
        cfg = load_settings()

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg

    # Only touch Firebase for collaborators that were not injected
    if identity is None or directory is None:
        firebase_app = initialize_firebase_app(cfg.firebase_credentials_path, cfg.firebase_project_id or None)
        if identity is None:
            identity = IdentityService(firebase_app)
        if directory is None:
            directory = CredentialDirectory(firestore_client(firebase_app), cfg.credentials_collection)

    app.extensions["user_lister"] = UserLister(identity, page_size=cfg.list_page_size)
    app.extensions["user_provisioner"] = UserProvisioner(identity, directory)

    # Register blueprints
    from user_provisioning.api import health, errors, users

    app.register_blueprint(health.bp)
    app.register_blueprint(users.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    # Register middleware/after_request handlers
    _register_middleware(app, cfg)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    print(f"[flask_app] Mode={mode_label}")
    print("[flask_app] Routes: GET /, GET /auth-users, POST /create-user")

    return app


def _register_middleware(app: Flask, cfg: AppConfig):
    """Register after_request middleware."""
    allowed_origins = cfg.cors_allowed_origins

    @app.after_request
    def add_cors_headers(response):
        """Allow cross-origin callers (configured origins, or any with '*')."""
        origin = request.headers.get("Origin")
        if "*" in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = "*"
        elif origin and origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers.add("Vary", "Origin")
        else:
            return response

        response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return response


if __name__ == "__main__":
    settings = load_settings()
    create_app(settings).run(host="0.0.0.0", port=settings.port)
