"""Utility helpers used across the project.

Make commonly used helpers available at the package level for convenience.

Exports:
- time helpers: `now_utc`, `now_ms`, `from_ms`, `to_iso`, `remaining_seconds`
- validation helpers: `is_valid_client_id`, `sanitize_json`, `VALID_CLIENT_ID_RE`
"""

from .time import now_utc, now_ms, from_ms, to_iso, remaining_seconds
from .validation import is_valid_client_id, sanitize_json, VALID_CLIENT_ID_RE

__all__ = [
	"now_utc",
	"now_ms",
	"from_ms",
	"to_iso",
	"remaining_seconds",
	"is_valid_client_id",
	"sanitize_json",
	"VALID_CLIENT_ID_RE",
]
