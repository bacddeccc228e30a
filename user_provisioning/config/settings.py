"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path

SECRETS_DIR = Path("/run/secrets")
DEFAULT_CREDENTIALS_FILE = "serviceAccountKey.json"
DEMO_API_TOKEN = "demo-api-token-change-in-production"
DEMO_AUDIT_SIGNING_KEY = "demo-audit-signing-key-change-in-production"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = SECRETS_DIR / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from {SECRETS_DIR}")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read {SECRETS_DIR}/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool

    # Static bearer token guarding the API
    api_token: str

    # Firebase
    firebase_credentials_path: str = DEFAULT_CREDENTIALS_FILE
    firebase_project_id: str = ""
    credentials_collection: str = "LoginCredentials"
    list_page_size: int = 200

    # HTTP
    port: int = 3000
    cors_allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    # Audit
    audit_log_signing_key: str = ""


def _resolve_credentials_path() -> str:
    """Locate the Firebase service-account key.

    Priority:
    1. FIREBASE_CREDENTIALS_PATH
    2. GOOGLE_APPLICATION_CREDENTIALS
    3. /run/secrets/firebase_service_account
    4. ./serviceAccountKey.json
    """
    for env_var in ("FIREBASE_CREDENTIALS_PATH", "GOOGLE_APPLICATION_CREDENTIALS"):
        value = os.environ.get(env_var, "").strip()
        if value:
            return value

    mounted = SECRETS_DIR / "firebase_service_account"
    if mounted.is_file():
        return str(mounted)

    return DEFAULT_CREDENTIALS_FILE


def _int_from_env(var_name: str, default: int, minimum: int, maximum: int) -> int:
    raw = os.environ.get(var_name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{var_name} must be an integer, got {raw!r}") from None
    if not minimum <= value <= maximum:
        raise RuntimeError(f"{var_name} must be between {minimum} and {maximum}, got {value}")
    return value


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    # API bearer token
    api_token = _load_secret_from_file("api_bearer_token", "API_BEARER_TOKEN")
    if not api_token:
        if not demo_mode:
            raise RuntimeError("API_BEARER_TOKEN not found in /run/secrets or environment")
        # Fixed value so every gunicorn worker accepts the same token
        api_token = os.environ.get("API_BEARER_TOKEN_DEMO") or DEMO_API_TOKEN
        os.environ["API_BEARER_TOKEN"] = api_token
        print("[demo-mode] Using demo API_BEARER_TOKEN")

    # Audit log signing key (read lazily by core.audit from the environment)
    audit_log_signing_key = _load_secret_from_file("audit_log_signing_key", "AUDIT_LOG_SIGNING_KEY") or ""
    if audit_log_signing_key:
        os.environ["AUDIT_LOG_SIGNING_KEY"] = audit_log_signing_key
    elif demo_mode:
        audit_log_signing_key = DEMO_AUDIT_SIGNING_KEY
        os.environ["AUDIT_LOG_SIGNING_KEY"] = audit_log_signing_key
        print("[demo-mode] Using demo AUDIT_LOG_SIGNING_KEY")
    else:
        print("[settings] WARNING: AUDIT_LOG_SIGNING_KEY not set; audit events will be unsigned")

    firebase_credentials_path = _resolve_credentials_path()
    firebase_project_id = os.environ.get("FIREBASE_PROJECT_ID", "").strip()
    credentials_collection = os.environ.get("CREDENTIALS_COLLECTION", "LoginCredentials").strip() or "LoginCredentials"
    list_page_size = _int_from_env("LIST_USERS_PAGE_SIZE", 200, 1, 1000)
    port = _int_from_env("PORT", 3000, 1, 65535)

    cors_allowed_origins = [
        origin.strip()
        for origin in os.environ.get("CORS_ALLOWED_ORIGINS", "*").split(",")
        if origin.strip()
    ] or ["*"]

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    print(f"[settings] Mode={mode_label}; collection={credentials_collection}; key={firebase_credentials_path}")

    if demo_mode:
        print("[settings] WARNING: Demo credentials in use. Do not deploy with these defaults.")

    return AppConfig(
        demo_mode=demo_mode,
        api_token=api_token,
        firebase_credentials_path=firebase_credentials_path,
        firebase_project_id=firebase_project_id,
        credentials_collection=credentials_collection,
        list_page_size=list_page_size,
        port=port,
        cors_allowed_origins=cors_allowed_origins,
        audit_log_signing_key=audit_log_signing_key,
    )
