from typing import Optional
import logging
import sqlite3

import aiosqlite

from db import connect
from utils.time import now_utc, to_iso
from models.domain_models import ObjectKind, Position, RoundState, WorldObject
from .exceptions import RoundStoreError, StateCorrupted, UnexpectedResult
from .round_store import RoundStore

logger = logging.getLogger(__name__)


class SqliteRoundStore(RoundStore):
    """SQLite-based implementation of RoundStore with atomic writes."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.db: aiosqlite.Connection = None
        logger.info(f"[STORE] SqliteRoundStore initialized with db_path: {db_path}")

    async def init(self):
        """Initialize database connection. Call this after construction."""
        self.db = await connect(self.db_path)
        async with self.db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name IN ('round_state', 'world_objects')"
        ) as cursor:
            tables = await cursor.fetchall()
        if len(tables) != 2:
            logger.error(f"[STORE] ✗ Round tables missing in {self.db_path}")
            raise RuntimeError(f"Database at {self.db_path} has no round tables - run db.ensure_db first")
        logger.info(f"[STORE] Round store connected to {self.db_path}")

    async def close(self):
        """Close database connection."""
        if self.db:
            await self.db.close()
            self.db = None

    # -------------------------------------------------
    # Reads
    # -------------------------------------------------

    async def load_round(self) -> Optional[RoundState]:
        # Raises: StateCorrupted
        cur = await self.db.execute(
            "SELECT round_number, claw_x, claw_y, metric FROM round_state WHERE id = 1"
        )
        row = await cur.fetchone()
        if row is None:
            return None

        cur = await self.db.execute(
            "SELECT object_id, kind, label, impact, x, y FROM world_objects ORDER BY slot"
        )
        try:
            objects = tuple(
                WorldObject(
                    object_id=r["object_id"],
                    kind=ObjectKind(r["kind"]),
                    label=r["label"],
                    impact=r["impact"],
                    x=r["x"],
                    y=r["y"],
                )
                for r in await cur.fetchall()
            )
        except ValueError as exc:
            raise StateCorrupted(f"Unreadable world object row: {exc}") from exc

        return RoundState(
            position=Position(row["claw_x"], row["claw_y"]),
            objects=objects,
            metric=row["metric"],
            round_number=row["round_number"],
        )

    # -------------------------------------------------
    # Writes (atomic)
    # -------------------------------------------------

    async def save_round(self, state: RoundState) -> None:
        # Raises: RoundStoreError
        now = to_iso(now_utc())
        try:
            await self.db.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as exc:
            raise RoundStoreError("Database busy; round state not saved") from exc
        try:
            await self.db.execute(
                """
                INSERT INTO round_state (id, round_number, claw_x, claw_y, metric, updated_at)
                VALUES (1, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    round_number = excluded.round_number,
                    claw_x = excluded.claw_x,
                    claw_y = excluded.claw_y,
                    metric = excluded.metric,
                    updated_at = excluded.updated_at
                """,
                (state.round_number, state.position.x, state.position.y, state.metric, now),
            )
            await self.db.execute("DELETE FROM world_objects")
            await self.db.executemany(
                """
                INSERT INTO world_objects (object_id, slot, kind, label, impact, x, y)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (obj.object_id, slot, obj.kind.value, obj.label, obj.impact, obj.x, obj.y)
                    for slot, obj in enumerate(state.objects)
                ],
            )
            await self.db.commit()
        except sqlite3.Error as exc:
            await self.db.rollback()
            logger.error(f"[STORE] ✗ Failed to save round {state.round_number}: {exc}")
            raise RoundStoreError("Failed to save round state") from exc

    async def save_position(self, position: Position) -> None:
        # Raises: RoundStoreError
        now = to_iso(now_utc())
        try:
            cursor = await self.db.execute(
                "UPDATE round_state SET claw_x = ?, claw_y = ?, updated_at = ? WHERE id = 1",
                (position.x, position.y, now),
            )
        except sqlite3.Error as exc:
            raise RoundStoreError("Failed to save claw position") from exc
        if cursor.rowcount == 0:
            raise RoundStoreError("No round state to update; save_round must run first")
        if cursor.rowcount != 1:
            raise UnexpectedResult(f"Position update touched {cursor.rowcount} round rows")
