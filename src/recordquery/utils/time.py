"""UTC timestamps for log entries and stored rows."""

from datetime import datetime, timezone


def utc_now_z() -> str:
    """Current UTC time as ISO 8601 with a ``Z`` suffix, e.g. ``2025-12-23T00:27:07.804867Z``."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
