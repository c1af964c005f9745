# fleet/timeutil.py
"""
Date handling for the fleet store.

Everything is stored as UTC: calendar fields as ``DATE`` and timestamps as naive
``DATETIME`` values that are implicitly UTC. Conversion to and from local time
happens only at the presentation boundary (``utc_to_local_input`` and
``local_input_to_utc``).
"""
from datetime import date, datetime, timezone

LOCAL_INPUT_FORMAT = "%Y-%m-%dT%H:%M"


def parse_iso(value):
    """Parse an ISO 8601 string into an aware UTC datetime.

    Date-only and naive values are taken to be UTC already. Raises ``ValueError``
    for anything that is not ISO 8601.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Not an ISO 8601 value: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_store_date(value):
    """ISO 8601 -> UTC calendar date (``YYYY-MM-DD`` in the store)."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return parse_iso(value).date()


def to_store_datetime(value):
    """ISO 8601 -> naive UTC datetime (``YYYY-MM-DD HH:MM:SS`` in the store)."""
    return parse_iso(value).replace(tzinfo=None, microsecond=0)


def format_date(value):
    return value.isoformat() if value is not None else None


def format_datetime(value):
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0).isoformat() + "Z"


def serialize(value):
    """Render a store value for JSON."""
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, date):
        return format_date(value)
    return value


# ----------------------------------------------------------
# PRESENTATION BOUNDARY
# ----------------------------------------------------------
def utc_to_local_input(value, tz):
    """UTC ISO string -> ``YYYY-MM-DDTHH:MM`` in ``tz`` (form input shape)."""
    if value in (None, ""):
        return ""
    return parse_iso(value).astimezone(tz).strftime(LOCAL_INPUT_FORMAT)


def local_input_to_utc(value, tz):
    """Local ``YYYY-MM-DDTHH:MM`` in ``tz`` -> UTC ISO string, or None if blank."""
    if value in (None, ""):
        return None
    local = datetime.fromisoformat(value)
    if local.tzinfo is None:
        local = local.replace(tzinfo=tz)
    return format_datetime(local)


def utc_to_local_display(value, tz):
    """UTC ISO string -> human readable local time."""
    if value in (None, ""):
        return ""
    return parse_iso(value).astimezone(tz).strftime("%Y-%m-%d %H:%M")
