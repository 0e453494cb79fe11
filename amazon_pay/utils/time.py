from datetime import datetime, timezone

TIMESTAMP_FORMAT_TZ = "%Y-%m-%dT%H:%M:%SZ"


def timestamp(time: datetime = None, format: str = TIMESTAMP_FORMAT_TZ) -> str:
    """Returns the given time (default: now) in UTC, rendered with ``format`` (ISO-8601 with a ``Z`` suffix)."""
    if not time:
        time = datetime.now(tz=timezone.utc)
    elif time.tzinfo is not None:
        time = time.astimezone(timezone.utc)
    return time.strftime(format)
