from __future__ import annotations

import asyncio
from datetime import timedelta

from infrastructure.timers import ExpiryTimer
from utils.time import now_utc


def test_armed_job_runs_once_and_rearming_replaces_it():
    fired = []

    async def callback(tag):
        fired.append(tag)

    async def scenario():
        timer = ExpiryTimer()
        timer.start()
        try:
            timer.arm("session-expiry", now_utc() + timedelta(milliseconds=300), callback, "old")
            timer.arm("session-expiry", now_utc() + timedelta(milliseconds=100), callback, "new")
            await asyncio.sleep(0.6)
        finally:
            timer.shutdown()

    asyncio.run(scenario())
    assert fired == ["new"]


def test_cancel_prevents_run_and_unknown_ids_are_ignored():
    fired = []

    async def callback():
        fired.append(True)

    async def scenario():
        timer = ExpiryTimer()
        timer.start()
        try:
            timer.arm("session-expiry", now_utc() + timedelta(milliseconds=100), callback)
            timer.cancel("session-expiry")
            timer.cancel("never-armed")
            await asyncio.sleep(0.3)
        finally:
            timer.shutdown()

    asyncio.run(scenario())
    assert fired == []
