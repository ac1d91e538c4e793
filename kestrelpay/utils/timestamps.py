"""
KestrelPay - Timestamps
ISO-8601 UTC timestamps for records and API responses.
"""

from datetime import datetime, timezone


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with a trailing Z."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
