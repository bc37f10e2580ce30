"""Timestamp helpers used by records and published artifacts."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current time as an ISO 8601 string (UTC, seconds precision)."""
    return utc_now().replace(microsecond=0).isoformat().replace("+00:00", "Z")


def to_epoch_ms(value: str) -> int:
    """Convert an ISO 8601 timestamp to epoch milliseconds."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(utc_now().timestamp() * 1000)
