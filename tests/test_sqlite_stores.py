from __future__ import annotations

import asyncio

import pytest

from db import connect, ensure_db
from models.domain_models import ObjectKind, Position, QueueEntry, RoundState, Session, WorldObject
from stores import RoundStoreError, StateCorrupted, open_stores


def sample_round(round_number=2):
    objects = (
        WorldObject("b2", ObjectKind.NEGATIVE, "Cola", 60.0, 40.0, 50.0),
        WorldObject("a1", ObjectKind.POSITIVE, "Walk", None, 150.5, 90.25),
    )
    return RoundState(Position(20, -40), objects, 135.0, round_number)


def test_round_store_roundtrip_keeps_layout_order(db_path):
    async def scenario():
        round_store, scheduler_store = await open_stores(db_path)
        try:
            empty = await round_store.load_round()
            await round_store.save_round(sample_round())
            await round_store.save_position(Position(-60, 0))
            loaded = await round_store.load_round()
        finally:
            await round_store.close()
            await scheduler_store.close()
        return empty, loaded

    empty, loaded = asyncio.run(scenario())
    assert empty is None
    assert [o.object_id for o in loaded.objects] == ["b2", "a1"]
    assert loaded.objects[1].impact is None
    assert loaded.position == Position(-60, 0)
    assert loaded.metric == 135.0
    assert loaded.round_number == 2


def test_save_round_replaces_previous_layout(db_path):
    async def scenario():
        round_store, scheduler_store = await open_stores(db_path)
        try:
            await round_store.save_round(sample_round())
            smaller = RoundState(Position(0, 0), sample_round().objects[:1], 90.0, 3)
            await round_store.save_round(smaller)
            return await round_store.load_round()
        finally:
            await round_store.close()
            await scheduler_store.close()

    loaded = asyncio.run(scenario())
    assert [o.label for o in loaded.objects] == ["Cola"]
    assert loaded.round_number == 3


def test_save_position_before_any_round_fails(db_path):
    async def scenario():
        round_store, scheduler_store = await open_stores(db_path)
        try:
            with pytest.raises(RoundStoreError):
                await round_store.save_position(Position(20, 0))
        finally:
            await round_store.close()
            await scheduler_store.close()

    asyncio.run(scenario())


def test_scheduler_store_roundtrip_survives_reopen(db_path):
    queue = [QueueEntry("bob", 1_000), QueueEntry("carol", 2_000)]
    session = Session("alice", 99_000)

    async def write():
        round_store, scheduler_store = await open_stores(db_path)
        try:
            assert await scheduler_store.load_scheduler_state() == ([], None)
            await scheduler_store.save_scheduler_state(queue, session)
        finally:
            await round_store.close()
            await scheduler_store.close()

    async def read():
        round_store, scheduler_store = await open_stores(db_path)
        try:
            return await scheduler_store.load_scheduler_state()
        finally:
            await round_store.close()
            await scheduler_store.close()

    asyncio.run(write())
    assert asyncio.run(read()) == (queue, session)


def test_idle_session_is_stored_as_none(db_path):
    async def scenario():
        round_store, scheduler_store = await open_stores(db_path)
        try:
            await scheduler_store.save_scheduler_state([QueueEntry("bob", 1)], Session("alice", 5))
            await scheduler_store.save_scheduler_state([], None)
            return await scheduler_store.load_scheduler_state()
        finally:
            await round_store.close()
            await scheduler_store.close()

    assert asyncio.run(scenario()) == ([], None)


def test_unknown_object_kind_is_reported_as_corruption(db_path):
    async def scenario():
        round_store, scheduler_store = await open_stores(db_path)
        try:
            await round_store.save_round(sample_round())
            db = await connect(db_path)
            try:
                # bypass the CHECK constraint the way a hand-edited file would
                await db.execute("PRAGMA ignore_check_constraints = ON")
                await db.execute("UPDATE world_objects SET kind = 'bonus' WHERE object_id = 'a1'")
            finally:
                await db.close()
            with pytest.raises(StateCorrupted):
                await round_store.load_round()
        finally:
            await round_store.close()
            await scheduler_store.close()

    asyncio.run(scenario())


def test_ensure_db_is_idempotent(tmp_path):
    path = str(tmp_path / "nested" / "claw.sqlite3")

    async def scenario():
        await ensure_db(path)
        await ensure_db(path)
        db = await connect(path)
        try:
            cur = await db.execute("SELECT name FROM sqlite_master WHERE type='table'")
            return {row[0] for row in await cur.fetchall()}
        finally:
            await db.close()

    tables = asyncio.run(scenario())
    assert {"round_state", "world_objects", "queue_entries", "active_session"} <= tables
