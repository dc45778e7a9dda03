"""Small time helpers."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def _rfc3339(moment):
    text = moment.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        return text[:-6] + "Z"
    return text


def _local_zone():
    return datetime.now().astimezone().tzinfo


def now_rfc3339():
    """The current local time as an RFC 3339 string with second precision."""
    return _rfc3339(datetime.now().astimezone())


def load_location(name):
    """Time zone called ``name``; the local zone if it cannot be loaded."""
    if name in ("", "UTC"):
        return timezone.utc
    if name == "Local":
        return _local_zone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return _local_zone()


def to_location(moment, location):
    """The same instant as ``moment`` expressed in the zone ``location``."""
    return moment.astimezone(load_location(location))