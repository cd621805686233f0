"""Timestamp parsing and rendering shared by the log tools.

Input accepts an offset timestamp (``2025-01-01T00:00:00Z``,
``2025-01-01T08:00:00+08:00``) or a local one (``2025-01-01T00:00:00``),
in ISO-8601 extended form only. Local values stay naive so the database
interprets them in its session time zone; when rendered they are read in
that same zone.
"""

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dblog_mcp.lib.logging_config import get_logger
from dblog_mcp.models.error_types import ValidationError

logger = get_logger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

ISO_TIMESTAMP = re.compile(
    r'\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2}(?:\.\d{1,9})?)?'
    r'(?:[Zz]|[+-]\d{2}:\d{2}(?::\d{2})?)?'
)

# ISO offsets ("+08", "-05:30") and the "<+08>-08" form the server reports
# for a numeric TimeZone setting
_NUMERIC_ZONE = re.compile(r'<?([+-])(\d{1,2})(?::?(\d{2}))?(?:>.*)?')


def resolve_zone(name: Optional[str]) -> tzinfo:
    """Return the tzinfo for a session zone name, UTC when unset."""
    if not name or name.upper() == 'UTC':
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        pass

    match = _NUMERIC_ZONE.fullmatch(name.strip())
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
        return timezone(-offset if sign == '-' else offset)

    logger.warning(f"Unknown time zone '{name}', local timestamps are read as UTC")
    return timezone.utc


def _parse_iso(text: str) -> datetime:
    if not ISO_TIMESTAMP.fullmatch(text):
        raise ValueError(f"Text '{text}' could not be parsed")
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse an ISO-8601 timestamp with or without a UTC offset.

    Args:
        value: Timestamp text

    Returns:
        An aware datetime for offset input, a naive one for local input

    Raises:
        ValidationError: If the value is blank or not a timestamp
    """
    if value is None or not value.strip():
        raise ValidationError("Invalid timestamp format - Timestamp value is required", field='timestamp')

    trimmed = value.strip()
    try:
        return _parse_iso(trimmed)
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp format - {e}", field='timestamp')


def as_utc(value: datetime, local_zone: Optional[tzinfo] = None) -> datetime:
    """Convert to UTC, reading naive values in ``local_zone``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=local_zone or timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso_string(value: Optional[datetime], local_zone: Optional[tzinfo] = None) -> Optional[str]:
    """Render as an ISO-8601 UTC string ending in ``Z``."""
    if value is None:
        return None
    return as_utc(value, local_zone).isoformat().replace('+00:00', 'Z')


def to_unix_millis(value: Optional[datetime], local_zone: Optional[tzinfo] = None) -> Optional[int]:
    """Milliseconds since the Unix epoch."""
    if value is None:
        return None
    delta = as_utc(value, local_zone) - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000
