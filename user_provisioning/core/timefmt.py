"""Display formatting for identity service timestamps.

Timestamps are rendered in Indian Standard Time (UTC+05:30) as ``Mon D, YYYY``.
The offset is applied arithmetically; no timezone database is consulted.
"""
from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Union

logger = logging.getLogger(__name__)

IST_OFFSET = timedelta(hours=5, minutes=30)
INVALID_DATE = "Invalid Date"

# Fixed English month names so output does not depend on the process locale
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

Timestamp = Union[str, int, float, datetime, None]


def parse_timestamp(value: Timestamp) -> Optional[datetime]:
    """Parse a UTC timestamp into an aware datetime.

    Accepts RFC 1123 strings (``Mon, 01 Jan 2024 18:35:00 GMT``), ISO-8601
    strings (``2024-01-01T18:35:00Z``), epoch milliseconds, or datetimes.
    Values without an explicit zone are taken as UTC.

    Returns:
        Aware datetime, or None when the value cannot be parsed
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        parsed = _parse_string(value.strip())
        if parsed is None:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_string(text: str) -> Optional[datetime]:
    if not text:
        return None
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        pass

    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso_text)
    except ValueError:
        return None


def format_ist_date(value: Timestamp) -> str:
    """Format a UTC timestamp as an IST calendar date.

    Example:
        >>> format_ist_date("2024-01-01T18:35:00Z")
        'Jan 2, 2024'

    Unparseable input yields ``"Invalid Date"`` instead of raising.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        if value is not None:
            logger.warning("Unparseable timestamp %r rendered as %s", value, INVALID_DATE)
        return INVALID_DATE

    try:
        local = parsed.astimezone(timezone.utc) + IST_OFFSET
    except OverflowError:
        return INVALID_DATE
    return f"{_MONTHS[local.month - 1]} {local.day}, {local.year}"
