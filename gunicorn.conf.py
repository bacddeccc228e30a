"""Gunicorn configuration for the user provisioning API.

Each request runs on its own worker thread (gthread), so a slow Firebase call
only blocks the request that made it. Services hold no per-request state.

Environment:
- PORT: listen port (default 3000)
- GUNICORN_WORKERS / GUNICORN_THREADS: process and thread counts
"""
import os

wsgi_app = "user_provisioning.flask_app:create_app()"
bind = f"0.0.0.0:{os.environ.get('PORT', '3000')}"
worker_class = "gthread"
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
threads = int(os.environ.get("GUNICORN_THREADS", "8"))
accesslog = "-"


def post_fork(server, worker):
    """
    Called just after a worker has been forked.

    Reports where the worker will read its secrets from; the secrets
    themselves are loaded by user_provisioning.config.settings.
    """
    from pathlib import Path
    secrets_dir = Path("/run/secrets")
    if secrets_dir.exists() and secrets_dir.is_dir():
        secret_files = list(secrets_dir.glob("*"))
        if secret_files:
            worker.log.info(f"Found {len(secret_files)} secrets in /run/secrets")
            return

    if not os.environ.get("API_BEARER_TOKEN") and os.environ.get("DEMO_MODE", "false").lower() != "true":
        worker.log.warning("API_BEARER_TOKEN not set and /run/secrets is empty; app startup will fail")
