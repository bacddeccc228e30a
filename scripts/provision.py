"""Operator CLI for listing and provisioning Firebase users.

This module is a command-line wrapper around user_provisioning.core services,
sharing settings and validation with the HTTP API.
"""
from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from user_provisioning.config import load_settings
from user_provisioning.core import audit
from user_provisioning.core.exceptions import ProvisioningError, ValidationError
from user_provisioning.core.firebase import (
    CredentialDirectory,
    DocumentStoreError,
    FirebaseConfigError,
    IdentityService,
    firestore_client,
    initialize_firebase_app,
)
from user_provisioning.core.provisioning_service import UserLister, UserProvisioner
from user_provisioning.core.validators import CITIES, ROLES, validate_create_user_payload


def build_services(cfg):
    """Return (identity, directory) bound to the configured Firebase project."""
    firebase_app = initialize_firebase_app(cfg.firebase_credentials_path, cfg.firebase_project_id or None)
    identity = IdentityService(firebase_app)
    directory = CredentialDirectory(firestore_client(firebase_app), cfg.credentials_collection)
    return identity, directory


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Firebase user provisioning helper")
    parser.add_argument("--operator", default="cli",
                        help="Operator identifier for audit logs (default: cli)")

    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("list-users")

    sc = sub.add_parser("create-user")
    sc.add_argument("--email", required=True)
    sc.add_argument("--password", required=True)
    sc.add_argument("--display-name", required=True)
    sc.add_argument("--role", required=True, help=f"One of: {', '.join(ROLES)}")
    sc.add_argument("--city", required=True, help=f"One of: {', '.join(CITIES)}")

    sub.add_parser("list-directory")
    sub.add_parser("verify-audit")

    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    if args.cmd == "verify-audit":
        summary = audit.verify_audit_log()
        print(f"Audit log: {summary.valid}/{summary.total} events with valid signatures")
        if summary.unsigned:
            print(f"Audit log: {summary.unsigned} unsigned event(s); set AUDIT_LOG_SIGNING_KEY to sign new events")
        if summary.invalid:
            print(f"[verify-audit] {summary.invalid} event(s) failed verification", file=sys.stderr)
            return 1
        return 0

    cfg = load_settings()
    try:
        identity, directory = build_services(cfg)
    except FirebaseConfigError as e:
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        return 1

    if args.cmd == "list-users":
        try:
            result = UserLister(identity, page_size=cfg.list_page_size).list_users()
        except ProvisioningError as e:
            print(f"[list-users] Error: {e}", file=sys.stderr)
            return 1
        print(json.dumps(result, indent=2))
    elif args.cmd == "create-user":
        payload = {
            "email": args.email,
            "password": args.password,
            "displayName": args.display_name,
            "Role": args.role,
            "City": args.city,
        }
        try:
            value = validate_create_user_payload(payload)
            user = UserProvisioner(identity, directory, operator=args.operator).provision(value)
        except ValidationError as e:
            for message in e.errors:
                print(f"[create-user] Invalid: {message}", file=sys.stderr)
            return 1
        except ProvisioningError as e:
            print(f"[create-user] Error: {e}", file=sys.stderr)
            return 1
        print(json.dumps(user, indent=2))
    elif args.cmd == "list-directory":
        try:
            entries = directory.get_entries()
        except (ProvisioningError, DocumentStoreError) as e:
            print(f"[list-directory] Error: {e}", file=sys.stderr)
            return 1
        print(json.dumps(entries, indent=2, sort_keys=True))

    return 0


if __name__ == "__main__":
    sys.exit(main())
