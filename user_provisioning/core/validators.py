"""Input validation for user creation payloads."""
from __future__ import annotations
import re
from typing import Any, Callable, Optional

from user_provisioning.core.exceptions import ValidationError

ROLES = ("sales associate", "Manager", "admin", "OPS Head")
CITIES = ("CHENNAI",)

CREATE_USER_FIELDS = ("email", "password", "displayName", "Role", "City")

PASSWORD_MIN_LENGTH = 6
DISPLAY_NAME_MIN_LENGTH = 3
EMAIL_MAX_LENGTH = 254

EMAIL_LOCAL_MAX_LENGTH = 64
DOMAIN_LABEL_MAX_LENGTH = 63

LOCAL_ATOM_PATTERN = re.compile(r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+")
DOMAIN_LABEL_PATTERN = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?")
TLD_PATTERN = re.compile(r"[A-Za-z]{2,}")

# Fields validated only against an allow-list; type and emptiness fold into it
ALLOW_LIST_FIELDS = ("Role", "City")


def is_valid_email(value: str) -> bool:
    """Check addr-spec syntax: dot-atom local part, hostname labels, alphabetic TLD."""
    if len(value) > EMAIL_MAX_LENGTH:
        return False

    local, _, domain = value.rpartition("@")
    if not local or not domain or len(local) > EMAIL_LOCAL_MAX_LENGTH:
        return False
    if not all(LOCAL_ATOM_PATTERN.fullmatch(atom) for atom in local.split(".")):
        return False

    labels = domain.split(".")
    if len(labels) < 2:
        return False
    if not all(
        len(label) <= DOMAIN_LABEL_MAX_LENGTH and DOMAIN_LABEL_PATTERN.fullmatch(label)
        for label in labels
    ):
        return False
    return bool(TLD_PATTERN.fullmatch(labels[-1]))


def _check_email(value: str) -> Optional[str]:
    if not is_valid_email(value):
        return '"email" must be a valid email'
    return None


def _min_length(field: str, limit: int) -> Callable[[str], Optional[str]]:
    def check(value: str) -> Optional[str]:
        if len(value) < limit:
            return f'"{field}" length must be at least {limit} characters long'
        return None
    return check


def _one_of(field: str, allowed: tuple[str, ...]) -> Callable[[str], Optional[str]]:
    def check(value: str) -> Optional[str]:
        if value not in allowed:
            return f"{field} must be one of: {', '.join(allowed)}"
        return None
    return check


_RULES: dict[str, Callable[[str], Optional[str]]] = {
    "email": _check_email,
    "password": _min_length("password", PASSWORD_MIN_LENGTH),
    "displayName": _min_length("displayName", DISPLAY_NAME_MIN_LENGTH),
    "Role": _one_of("Role", ROLES),
    "City": _one_of("City", CITIES),
}


def _field_error(field: str, payload: dict) -> Optional[str]:
    """Return the first violated constraint for ``field``, if any."""
    if field not in payload:
        return f'"{field}" is required'

    value = payload[field]
    if field in ALLOW_LIST_FIELDS:
        return _RULES[field](value)
    if not isinstance(value, str):
        return f'"{field}" must be a string'
    if value == "":
        return f'"{field}" is not allowed to be empty'
    return _RULES[field](value)


def validate_create_user_payload(payload: Any) -> dict:
    """Validate a create-user payload.

    Every field is checked and all violations are reported together, one
    message per field plus one per unknown key.

    Args:
        payload: Decoded JSON body

    Returns:
        Payload restricted to email, password, displayName, Role, City

    Raises:
        ValidationError: If any constraint is violated
    """
    if not isinstance(payload, dict):
        raise ValidationError(['"value" must be of type object'])

    errors = [
        message
        for message in (_field_error(field, payload) for field in CREATE_USER_FIELDS)
        if message
    ]
    errors.extend(f'"{key}" is not allowed' for key in payload if key not in CREATE_USER_FIELDS)

    if errors:
        raise ValidationError(errors)

    return {field: payload[field] for field in CREATE_USER_FIELDS}
