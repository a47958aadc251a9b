from __future__ import annotations

from datetime import date, datetime, timezone
from email.utils import format_datetime
from typing import Any


def parse_timestamp(value: Any) -> datetime:
    """
    Coerce a frontmatter timestamp into an aware datetime.

    Accepts datetime/date objects and
    ISO-8601 strings. Naive values are taken as UTC. Raises ValueError otherwise.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError("empty timestamp")
        try:
            dt = datetime.fromisoformat(s)
        except ValueError as e:
            raise ValueError(f"not an ISO-8601 timestamp: {value!r}") from e
    else:
        raise ValueError(f"not a timestamp: {value!r}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def try_parse_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        return None


def to_rfc822(dt: datetime) -> str:
    """Format for RSS <pubDate>/<lastBuildDate>, e.g. 'Mon, 15 Jan 2024 10:00:00 GMT'."""
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)
