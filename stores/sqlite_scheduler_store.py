from typing import Optional
import logging
import sqlite3

import aiosqlite

from db import connect
from utils.time import now_utc, to_iso
from models.domain_models import QueueEntry, Session
from .exceptions import SchedulerStoreError, StateCorrupted
from .scheduler_store import SchedulerStore

logger = logging.getLogger(__name__)


class SqliteSchedulerStore(SchedulerStore):
    """SQLite-based implementation of SchedulerStore with atomic writes."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.db: aiosqlite.Connection = None
        logger.info(f"[STORE] SqliteSchedulerStore initialized with db_path: {db_path}")

    async def init(self):
        """Initialize database connection. Call this after construction."""
        self.db = await connect(self.db_path)
        async with self.db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name IN ('queue_entries', 'active_session')"
        ) as cursor:
            tables = await cursor.fetchall()
        if len(tables) != 2:
            logger.error(f"[STORE] ✗ Scheduler tables missing in {self.db_path}")
            raise RuntimeError(f"Database at {self.db_path} has no scheduler tables - run db.ensure_db first")
        logger.info(f"[STORE] Scheduler store connected to {self.db_path}")

    async def close(self):
        """Close database connection."""
        if self.db:
            await self.db.close()
            self.db = None

    async def load_scheduler_state(self) -> tuple[list[QueueEntry], Optional[Session]]:
        # Raises: StateCorrupted
        cur = await self.db.execute(
            "SELECT client_id, joined_at FROM queue_entries ORDER BY slot"
        )
        queue = [QueueEntry(r["client_id"], int(r["joined_at"])) for r in await cur.fetchall()]

        cur = await self.db.execute(
            "SELECT client_id, expires_at FROM active_session WHERE id = 1"
        )
        row = await cur.fetchone()
        session = None
        if row is not None and row["client_id"] is not None:
            if row["expires_at"] is None:
                raise StateCorrupted(f"Active session for {row['client_id']} has no expiry")
            session = Session(row["client_id"], int(row["expires_at"]))

        if session is not None and any(e.client_id == session.client_id for e in queue):
            # Should never happen; the scheduler pops a client before granting
            logger.warning(f"[STORE] Active client {session.client_id} also queued; dropping queue entry")
            queue = [e for e in queue if e.client_id != session.client_id]

        return queue, session

    async def save_scheduler_state(
        self,
        queue: list[QueueEntry],
        session: Optional[Session],
    ) -> None:
        # Raises: SchedulerStoreError
        now = to_iso(now_utc())
        try:
            await self.db.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as exc:
            raise SchedulerStoreError("Database busy; queue state not saved") from exc
        try:
            await self.db.execute("DELETE FROM queue_entries")
            await self.db.executemany(
                "INSERT INTO queue_entries (client_id, slot, joined_at) VALUES (?, ?, ?)",
                [(entry.client_id, slot, entry.joined_at) for slot, entry in enumerate(queue)],
            )
            await self.db.execute(
                """
                INSERT INTO active_session (id, client_id, expires_at, updated_at)
                VALUES (1, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    client_id = excluded.client_id,
                    expires_at = excluded.expires_at,
                    updated_at = excluded.updated_at
                """,
                (
                    session.client_id if session else None,
                    session.expires_at if session else None,
                    now,
                ),
            )
            await self.db.commit()
        except sqlite3.Error as exc:
            await self.db.rollback()
            logger.error(f"[STORE] ✗ Failed to save scheduler state: {exc}")
            raise SchedulerStoreError("Failed to save queue/session state") from exc
