#!/usr/bin/env python3
"""Reset the claw database: drop every table and re-apply schema.sql.

Wipes the current round, the wait queue and the active session. The next
server start generates a fresh round at round 1.
"""
import os
import sqlite3
import sys
from pathlib import Path

CRITICAL_TABLES = ("round_state", "world_objects", "queue_entries", "active_session")


def reset_db(db_path: str, schema_path: str) -> None:
    db_path = Path(db_path).resolve()
    schema_path = Path(schema_path).resolve()

    if not schema_path.exists():
        print(f"[INIT] ✗ Error: Schema file not found at {schema_path}", file=sys.stderr)
        sys.exit(1)

    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    try:
        cursor = conn.cursor()
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'")
        for (table,) in cursor.fetchall():
            cursor.execute(f'DROP TABLE IF EXISTS "{table}"')
        conn.commit()

        conn.executescript(schema_path.read_text())
        conn.commit()

        cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
        created = {t[0] for t in cursor.fetchall()}
        missing = [t for t in CRITICAL_TABLES if t not in created]
        if missing:
            print(f"[INIT] ✗ Error: Missing critical tables {missing}", file=sys.stderr)
            sys.exit(1)
    except sqlite3.Error as e:
        print(f"[INIT] ✗ Error: Failed to initialize database: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        conn.close()

    # Readable and writable by the service user
    os.chmod(str(db_path), 0o666)
    print(f"[INIT] ✓ Database reset at {db_path}")


if __name__ == "__main__":
    root = Path(__file__).resolve().parent.parent
    db_path = sys.argv[1] if len(sys.argv) > 1 else os.environ.get("CLAW_DB_PATH", str(root / "clawcore.sqlite3"))
    schema_path = sys.argv[2] if len(sys.argv) > 2 else str(root / "db" / "schema.sql")
    reset_db(db_path, schema_path)
