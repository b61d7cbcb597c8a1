"""Time utilities: timezone-aware helpers and millisecond epoch conversion.

Session expiry is stored as an absolute epoch in milliseconds so that a
reconnect or a restart recomputes the remaining time instead of restarting it.
"""
from datetime import datetime, timezone


def now_utc() -> datetime:
	"""Return current UTC datetime with tzinfo set."""
	return datetime.now(timezone.utc)


def now_ms() -> int:
	"""Return the current UTC time as integer milliseconds since the epoch."""
	return int(now_utc().timestamp() * 1000)


def from_ms(value: int) -> datetime:
	"""Convert epoch milliseconds to a timezone-aware UTC datetime."""
	return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def to_iso(dt: datetime) -> str:
	"""Serialize a datetime to ISO8601 string."""
	return dt.isoformat()


def remaining_seconds(expires_at: int, now: int) -> int:
	"""Whole seconds left until `expires_at`, never negative."""
	return max(0, (expires_at - now) // 1000)
