"""Validation and sanitization helpers.

This module provides lightweight input validation used by route handlers
and by the session scheduler before a client id touches the queue.
"""
from typing import Any
import regex as re


# Client ids come from browsers (random tokens, uuids, nicknames). Allow
# Unicode letters/numbers plus a few separators, nothing that needs escaping.
VALID_CLIENT_ID_RE = re.compile(r"^[\p{L}\p{N}_\-.:@]+$", flags=re.UNICODE)
MAX_CLIENT_ID_LENGTH = 128


def is_valid_client_id(s: Any) -> bool:
	"""Return True if `s` is a usable client id.

	- Must be a non-blank string after stripping.
	- Enforces a sensible maximum length.
	- Uses Unicode-aware character class matching.
	"""
	if not isinstance(s, str):
		return False
	s = s.strip()
	if len(s) == 0 or len(s) > MAX_CLIENT_ID_LENGTH:
		return False
	return bool(VALID_CLIENT_ID_RE.match(s))


def sanitize_json(obj: Any, *, _depth: int = 0, _max_depth: int = 10) -> Any:
	"""Recursively sanitize an input JSON-like structure.

	- Rejects keys that start with '$' or contain '..' and prototype keys
	  (basic prototype pollution protection for browser subscribers).
	- Enforces max depth to avoid excessive recursion.
	- Returns a cleaned structure containing only dict/list/primitives.
	"""
	if _depth > _max_depth:
		raise ValueError("Input too deeply nested")

	if isinstance(obj, dict):
		clean = {}
		for k, v in obj.items():
			if not isinstance(k, str):
				continue
			if k.startswith("$") or ".." in k or k in ("__proto__", "prototype", "constructor"):
				continue
			clean[k] = sanitize_json(v, _depth=_depth + 1, _max_depth=_max_depth)
		return clean
	elif isinstance(obj, list):
		return [sanitize_json(v, _depth=_depth + 1, _max_depth=_max_depth) for v in obj]
	elif isinstance(obj, (str, int, float, bool)) or obj is None:
		return obj
	else:
		# Unknown types are rejected
		raise ValueError("Unsupported JSON value type")
