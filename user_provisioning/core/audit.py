"""Audit trail for provisioning operations.

Each create attempt is appended to a JSON Lines file. When a signing key is
configured, every line carries an HMAC-SHA256 ``signature`` computed over the
canonical JSON of the remaining fields, so edits to the file are detectable
with ``verify_audit_log()``.
"""

from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import logging
import os
from pathlib import Path
from typing import Any, Literal, NamedTuple

logger = logging.getLogger(__name__)

AUDIT_LOG_DIR = Path(os.environ.get("AUDIT_LOG_DIR", ".runtime/audit"))
AUDIT_LOG_FILE = AUDIT_LOG_DIR / "provisioning-events.jsonl"
_default_secret_paths: list[Path] = [
    Path("/run/secrets/audit_log_signing_key"),
    Path(".runtime/secrets/audit_log_signing_key"),
]

EventType = Literal["create_user"]


class AuditSummary(NamedTuple):
    """Outcome of verifying the audit trail."""
    total: int
    valid: int
    unsigned: int

    @property
    def invalid(self) -> int:
        """Events whose signature does not match, or lines that are not JSON."""
        return self.total - self.valid - self.unsigned


def _get_signing_key() -> bytes:
    """Read the signing key lazily; settings may export it after import."""
    key = os.environ.get("AUDIT_LOG_SIGNING_KEY", "").strip()
    if key:
        return key.encode("utf-8")
    for path in _default_secret_paths:
        if not path.is_file():
            continue
        try:
            return path.read_text(encoding="utf-8").strip().encode("utf-8")
        except OSError as e:
            logger.warning("Cannot read audit signing key from %s: %s", path, e)
    return b""


def _signature(key: bytes, event: dict[str, Any]) -> str:
    payload = json.dumps(event, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hmac.new(key, payload, hashlib.sha256).hexdigest()


def _append_line(line: str) -> None:
    AUDIT_LOG_DIR.mkdir(mode=0o700, parents=True, exist_ok=True)
    fd = os.open(AUDIT_LOG_FILE, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o600)
    with os.fdopen(fd, "a", encoding="utf-8") as handle:
        handle.write(line + "\n")
    # os.open only applies the mode on creation
    AUDIT_LOG_FILE.chmod(0o600)


def log_provisioning_event(
    event_type: EventType,
    email: str,
    *,
    operator: str = "api",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    """Append a provisioning event to the audit trail.

    Args:
        event_type: Operation performed
        email: Target account email
        operator: Who performed the operation ("api", "cli", ...)
        details: Additional context (role, city, error, ...)
        success: Whether the operation succeeded
    """
    event: dict[str, Any] = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "event_type": event_type,
        "email": email,
        "operator": operator,
        "success": success,
        "details": details or {},
    }

    key = _get_signing_key()
    if key:
        event["signature"] = _signature(key, event)

    _append_line(json.dumps(event, ensure_ascii=False))


def safe_log_provisioning_event(
    event_type: EventType,
    email: str,
    *,
    operator: str = "api",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> bool:
    """Log a provisioning event without ever raising.

    Audit failures must not fail the operation being audited; they are
    reported through the module logger instead.

    Returns:
        True if the event was written, False otherwise
    """
    try:
        log_provisioning_event(
            event_type,
            email,
            operator=operator,
            details=details,
            success=success,
        )
        return True
    except Exception as e:
        logger.warning("Failed to log %s event for %s: %s", event_type, email, e)
        return False


def _classify(line: str, key: bytes) -> str:
    """Return "valid", "unsigned" or "invalid" for one audit line."""
    try:
        event = json.loads(line)
    except json.JSONDecodeError:
        return "invalid"
    if not isinstance(event, dict):
        return "invalid"

    stored = event.pop("signature", None)
    if not stored:
        return "unsigned"
    if key and isinstance(stored, str) and hmac.compare_digest(stored, _signature(key, event)):
        return "valid"
    return "invalid"


def verify_audit_log() -> AuditSummary:
    """Check every signature in the audit trail.

    Unsigned events (written while no key was configured) are counted on
    their own, so they are not reported as tampering.
    """
    if not AUDIT_LOG_FILE.exists():
        return AuditSummary(0, 0, 0)

    key = _get_signing_key()
    counts = {"valid": 0, "unsigned": 0, "invalid": 0}
    with AUDIT_LOG_FILE.open("r", encoding="utf-8") as handle:
        for line in handle:
            if line.strip():
                counts[_classify(line, key)] += 1

    return AuditSummary(
        total=sum(counts.values()),
        valid=counts["valid"],
        unsigned=counts["unsigned"],
    )
