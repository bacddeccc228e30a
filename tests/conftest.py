"""Pytest shared fixtures: in-memory Firebase fakes and a Flask test client."""
import pathlib
import sys
from itertools import count

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from user_provisioning.config import AppConfig
from user_provisioning.core import audit
from user_provisioning.core.exceptions import DirectoryNotFoundError, DuplicateEmailError
from user_provisioning.core.firebase import IdentityRecord, IdentityServiceError
from user_provisioning.flask_app import create_app

TEST_API_TOKEN = "test-api-token-0123456789abcdef"

# 2024-01-01T18:35:00Z in epoch milliseconds
JAN_1_2024_1835_UTC_MS = 1704134100000


# ─────────────────────────────────────────────────────────────────────────────
# Firebase Fakes
# ─────────────────────────────────────────────────────────────────────────────
class FakeIdentityService:
    """In-memory stand-in for IdentityService.

    Page tokens are stringified offsets; the last page returns None.
    """

    def __init__(self, records=None):
        self.records = list(records or [])
        self.page_calls = []
        self.created = []
        self.fail_on_page = None
        self.create_error = None
        self._uids = count(1)

    def list_users_page(self, page_token=None, max_results=200):
        self.page_calls.append((page_token, max_results))
        if self.fail_on_page is not None and len(self.page_calls) == self.fail_on_page:
            raise IdentityServiceError("Identity backend unavailable", "UNAVAILABLE")

        start = int(page_token or 0)
        chunk = self.records[start:start + max_results]
        end = start + len(chunk)
        next_token = str(end) if end < len(self.records) else None
        return chunk, next_token

    def create_user(self, email, password, display_name):
        if self.create_error is not None:
            raise self.create_error
        if any(record.email == email for record in self.records):
            raise IdentityServiceError(
                "The user with the provided email already exists (EMAIL_EXISTS).",
                "ALREADY_EXISTS",
            )
        record = IdentityRecord(
            uid=f"uid-{next(self._uids)}",
            email=email,
            display_name=display_name,
            provider_ids=["password"],
            created_at=JAN_1_2024_1835_UTC_MS,
            last_sign_in_at=None,
        )
        self.records.append(record)
        self.created.append((email, password, display_name))
        return record


class FakeCredentialDirectory:
    """In-memory stand-in for CredentialDirectory (one document, or none)."""

    def __init__(self, entries=None, exists=True):
        self.document = dict(entries or {}) if exists else None
        self.add_calls = []

    def add_entry(self, email, entry):
        self.add_calls.append((email, list(entry)))
        if self.document is None:
            raise DirectoryNotFoundError("LoginCredentials")
        if email in self.document:
            raise DuplicateEmailError(email)
        self.document[email] = list(entry)

    def get_entries(self):
        if self.document is None:
            raise DirectoryNotFoundError("LoginCredentials")
        return dict(self.document)


def make_record(index: int, **overrides) -> IdentityRecord:
    """Build a deterministic identity record."""
    fields = dict(
        uid=f"user-{index:04d}",
        email=f"user{index}@example.com",
        display_name=f"User {index}",
        provider_ids=["password"],
        created_at=JAN_1_2024_1835_UTC_MS,
        last_sign_in_at=JAN_1_2024_1835_UTC_MS,
    )
    fields.update(overrides)
    return IdentityRecord(**fields)


# ─────────────────────────────────────────────────────────────────────────────
# Audit isolation
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def temp_audit_dir(monkeypatch, tmp_path):
    """Redirect the audit trail into a per-test directory."""
    audit_dir = tmp_path / "audit"
    audit_file = audit_dir / "provisioning-events.jsonl"
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", audit_dir)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", audit_file)
    monkeypatch.setattr(audit, "_default_secret_paths", [])
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "test-signing-key-for-audit-trail")
    return audit_dir, audit_file


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def app_config():
    return AppConfig(demo_mode=False, api_token=TEST_API_TOKEN)


@pytest.fixture()
def identity():
    return FakeIdentityService()


@pytest.fixture()
def directory():
    return FakeCredentialDirectory()


@pytest.fixture()
def record_factory():
    return make_record


@pytest.fixture()
def identity_factory():
    return FakeIdentityService


@pytest.fixture()
def directory_factory():
    return FakeCredentialDirectory


@pytest.fixture()
def flask_app(app_config, identity, directory):
    app = create_app(app_config, identity=identity, directory=directory)
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(flask_app):
    with flask_app.test_client() as client:
        yield client


@pytest.fixture()
def auth_headers():
    return {"Authorization": f"Bearer {TEST_API_TOKEN}"}


@pytest.fixture()
def valid_payload():
    return {
        "email": "a@b.com",
        "password": "secret1",
        "displayName": "Ann",
        "Role": "admin",
        "City": "CHENNAI",
    }


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a Firebase project)"
    )
