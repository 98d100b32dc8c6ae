from datetime import datetime, timezone


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse an ISO 8601 date or date-time into a naive UTC datetime.

    A bare date means midnight. Offsets (including `Z`) are converted to UTC.
    Raises ValueError on anything else.
    """
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Render as UTC with millisecond precision and a `Z` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
