"""Canonical timestamp text form shared by every table.

Timestamps are stored as fixed-width UTC strings
(``2026-01-01T12:00:00.000000+00:00``) so that lexical order in SQL equals
chronological order.  ``datetime.isoformat()`` is not used because it drops
the fractional part when microseconds are zero.
"""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import PlainSerializer

from shotauto.platform.logging_config import get_logger

logger = get_logger(__name__)

CANONICAL_FORMAT = "%Y-%m-%dT%H:%M:%S.%f+00:00"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render an aware (or naive-as-UTC) datetime in the canonical form."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(CANONICAL_FORMAT)


def utc_now_iso() -> str:
    return format_timestamp(utc_now())


def parse_timestamp(text: str | None) -> tuple[datetime, bool]:
    """Lenient decode: parse stored text, falling back to *now*.

    Returns ``(value, was_defaulted)``.  Any ISO-8601 string is accepted,
    including SQLite's ``CURRENT_TIMESTAMP`` form (``YYYY-MM-DD HH:MM:SS``,
    implicitly UTC).  Unparseable or missing text yields the current time and
    ``was_defaulted=True`` instead of raising.
    """
    if text:
        try:
            parsed = datetime.fromisoformat(text)
        except (TypeError, ValueError):
            pass
        else:
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc), False

    logger.warning("timestamp_defaulted_to_now", raw=text)
    return utc_now(), True


def parse_optional_timestamp(text: str | None) -> datetime | None:
    """Decode a nullable column; garbage is treated as absent."""
    if text is None:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except (TypeError, ValueError):
        logger.warning("optional_timestamp_dropped", raw=text)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# Models carry datetimes; dumping them yields the canonical text.
Timestamp = Annotated[datetime, PlainSerializer(format_timestamp, return_type=str)]
OptionalTimestamp = Annotated[
    datetime | None,
    PlainSerializer(
        lambda v: format_timestamp(v) if v is not None else None,
        return_type=str | None,
    ),
]
