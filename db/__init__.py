"""Database package helpers.

Expose connection and initialization helpers so callers can import
from `db` directly (e.g. `from db import connect, ensure_db`).

Both stores open their own connection through `connect`; the schema in
`db/schema.sql` is applied by `ensure_db` at startup.
"""

from .connections import connect, init_db, ensure_db, SCHEMA_PATH

__all__ = ["connect", "init_db", "ensure_db", "SCHEMA_PATH"]
