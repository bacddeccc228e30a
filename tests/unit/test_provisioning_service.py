"""Unit tests for UserLister and UserProvisioner."""
import json

import pytest

from user_provisioning.core.exceptions import (
    DirectoryNotFoundError,
    DuplicateEmailError,
    ProvisioningError,
    UserCreationError,
    UserListingError,
)
from user_provisioning.core.firebase import DocumentStoreError, IdentityServiceError
from user_provisioning.core.provisioning_service import UserLister, UserProvisioner, project_user


# ─────────────────────────────────────────────────────────────────────────────
# UserLister
# ─────────────────────────────────────────────────────────────────────────────
def test_project_user_shape(record_factory):
    record = record_factory(7, provider_ids=["password", "google.com"], last_sign_in_at=None)

    assert project_user(record) == {
        "uid": "user-0007",
        "email": "user7@example.com",
        "providers": ["password", "google.com"],
        "createdAt": "Jan 2, 2024",
        "lastLogin": "Invalid Date",
    }


def test_lister_follows_tokens_across_three_full_pages(identity_factory, record_factory):
    identity = identity_factory([record_factory(i) for i in range(600)])

    result = UserLister(identity, page_size=200).list_users()

    assert result["total"] == 600
    uids = [user["uid"] for user in result["users"]]
    assert uids == [f"user-{i:04d}" for i in range(600)]
    assert len(set(uids)) == 600
    assert identity.page_calls == [(None, 200), ("200", 200), ("400", 200)]


def test_lister_single_partial_page(identity_factory, record_factory):
    identity = identity_factory([record_factory(i) for i in range(3)])

    result = UserLister(identity).list_users()

    assert result["total"] == 3
    assert identity.page_calls == [(None, 200)]


def test_lister_empty_service(identity_factory):
    assert UserLister(identity_factory()).list_users() == {"total": 0, "users": []}


def test_lister_aborts_on_page_failure(identity_factory, record_factory):
    identity = identity_factory([record_factory(i) for i in range(450)])
    identity.fail_on_page = 3

    with pytest.raises(UserListingError) as exc:
        UserLister(identity).list_users()

    assert exc.value.status == 500
    assert exc.value.to_dict() == {"error": "Identity backend unavailable"}


# ─────────────────────────────────────────────────────────────────────────────
# UserProvisioner
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def payload():
    return {
        "email": "ann@example.com",
        "password": "secret1",
        "displayName": "Ann",
        "Role": "sales associate",
        "City": "CHENNAI",
    }


def test_provision_creates_account_and_directory_entry(identity, directory, payload):
    user = UserProvisioner(identity, directory).provision(payload)

    assert user == {
        "uid": "uid-1",
        "email": "ann@example.com",
        "displayName": "Ann",
        "Role": "sales associate",
        "City": "CHENNAI",
    }
    assert identity.created == [("ann@example.com", "secret1", "Ann")]
    assert directory.document == {"ann@example.com": ["Ann", "ann@example.com", "sales associate", "CHENNAI"]}


def test_directory_merge_keeps_existing_keys(identity, directory_factory, payload):
    directory = directory_factory({"old@example.com": ["Old", "old@example.com", "admin", "CHENNAI"]})

    UserProvisioner(identity, directory).provision(payload)

    assert set(directory.document) == {"old@example.com", "ann@example.com"}


def test_identity_rejection_skips_directory(identity, directory, payload):
    identity.create_error = IdentityServiceError("The email address is improperly formatted.", "INVALID_ARGUMENT")

    with pytest.raises(UserCreationError) as exc:
        UserProvisioner(identity, directory).provision(payload)

    assert str(exc.value) == "The email address is improperly formatted."
    assert directory.add_calls == []


def test_duplicate_directory_key_raises_conflict(identity, directory_factory, payload):
    directory = directory_factory({"ann@example.com": ["Ann", "ann@example.com", "admin", "CHENNAI"]})

    with pytest.raises(DuplicateEmailError) as exc:
        UserProvisioner(identity, directory).provision(payload)

    assert exc.value.to_dict() == {"message": "Email ann@example.com already exists"}
    # Identity account is not rolled back
    assert [r.email for r in identity.records] == ["ann@example.com"]


def test_missing_directory_document(identity, directory_factory, payload):
    with pytest.raises(DirectoryNotFoundError) as exc:
        UserProvisioner(identity, directory_factory(exists=False)).provision(payload)

    assert str(exc.value) == "No document found in LoginCredentials"


def test_document_store_failure_becomes_provisioning_error(identity, payload):
    class BrokenDirectory:
        def add_entry(self, email, entry):
            raise DocumentStoreError("Failed to update LoginCredentials: 503 unavailable")

    with pytest.raises(ProvisioningError) as exc:
        UserProvisioner(identity, BrokenDirectory()).provision(payload)

    assert exc.value.status == 400
    assert "503 unavailable" in exc.value.message


def test_audit_records_success_and_failure(identity, directory, payload, temp_audit_dir):
    _, audit_file = temp_audit_dir
    provisioner = UserProvisioner(identity, directory, operator="tester")

    provisioner.provision(payload)
    with pytest.raises(UserCreationError):
        provisioner.provision(payload)

    events = [json.loads(line) for line in audit_file.read_text().splitlines()]
    assert [(e["event_type"], e["success"]) for e in events] == [("create_user", True), ("create_user", False)]
    assert events[0]["operator"] == "tester"
    assert events[0]["details"]["uid"] == "uid-1"
    assert events[1]["details"]["stage"] == "identity"
    assert "secret1" not in audit_file.read_text()
