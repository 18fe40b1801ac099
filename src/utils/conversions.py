from datetime import datetime, date, timezone


def to_utc_datetime(value):
    """Normalize a stored time value into an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), ISO-8601 strings and epoch
    milliseconds. Returns None for missing or unparseable values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return to_utc_datetime(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def parse_date_key(date_key: str):
    """Calendar date from a YYYY-MM-DD document id, or None"""
    try:
        return date.fromisoformat(date_key)
    except (TypeError, ValueError):
        return None
