"""Timestamp helpers.

Task timestamps are stored as UTC instants and handed back to callers in
local civil time. The conversion only happens on the way out, so nothing
written to the store ever carries a local offset.
"""
from datetime import datetime, timezone, tzinfo
from typing import Optional
from .config import get_settings, resolve_timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_timezone() -> Optional[tzinfo]:
    """The configured LOCAL_TIMEZONE, or None for the host's zone"""
    name = get_settings().local_timezone
    return resolve_timezone(name) if name else None


def to_local(instant: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert a stored instant to local time.

    The instant itself is unchanged, only its offset is. ``tz`` falls back
    to :func:`local_timezone`, and ``astimezone(None)`` picks the host zone.
    """
    if tz is None:
        tz = local_timezone()
    return ensure_utc(instant).astimezone(tz)
