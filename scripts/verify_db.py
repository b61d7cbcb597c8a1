#!/usr/bin/env python3
"""Verify the claw database and print the persisted round and queue."""
import os
import sqlite3
import sys

CRITICAL_TABLES = {"round_state", "world_objects", "queue_entries", "active_session"}

db_path = sys.argv[1] if len(sys.argv) > 1 else os.environ.get("CLAW_DB_PATH", "clawcore.sqlite3")

try:
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    cursor.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
    found_tables = {t[0] for t in cursor.fetchall()}
    print(f"[VERIFY] Database at {db_path}")

    missing = CRITICAL_TABLES - found_tables
    if missing:
        print(f"[VERIFY] ✗ CRITICAL: Missing tables: {sorted(missing)}")
        sys.exit(1)

    cursor.execute("SELECT round_number, claw_x, claw_y, metric FROM round_state WHERE id = 1")
    row = cursor.fetchone()
    if row:
        print(f"[VERIFY]   round {row[0]}: claw at ({row[1]}, {row[2]}), metric {row[3]}")
    else:
        print("[VERIFY]   no round yet")

    cursor.execute("SELECT kind, COUNT(*) FROM world_objects GROUP BY kind")
    for kind, count in cursor.fetchall():
        print(f"[VERIFY]   {count} {kind} objects left")

    cursor.execute("SELECT client_id, expires_at FROM active_session WHERE id = 1")
    row = cursor.fetchone()
    print(f"[VERIFY]   active session: {row[0] if row and row[0] else 'none'}")

    cursor.execute("SELECT client_id FROM queue_entries ORDER BY slot")
    queue = [r[0] for r in cursor.fetchall()]
    print(f"[VERIFY]   queue: {queue or 'empty'}")

    print("[VERIFY] ✓ All critical tables present")
    sys.exit(0)

except sqlite3.Error as e:
    print(f"[VERIFY] ✗ Error verifying database: {e}")
    sys.exit(1)
