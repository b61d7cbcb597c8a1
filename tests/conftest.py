from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import Any, Optional

import pytest

# Ensure the project root is on sys.path for imports in tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from models.domain_models import CatalogEntry, ObjectKind, Position, QueueEntry, RoundState, Session  # noqa: E402
from services.exceptions import DriverError  # noqa: E402
from services.world_objects import WorldObjectGenerator  # noqa: E402
from stores import RoundStore, RoundStoreError, SchedulerStore, SchedulerStoreError  # noqa: E402


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class ManualTimer:
    """Stands in for ExpiryTimer; jobs run only when a test fires them."""

    def __init__(self):
        self.jobs: dict[str, tuple[Any, Any, tuple]] = {}
        self.cancelled: list[str] = []

    def arm(self, job_id, run_at, callback, *args) -> None:
        self.jobs[job_id] = (run_at, callback, args)

    def cancel(self, job_id) -> None:
        self.cancelled.append(job_id)
        self.jobs.pop(job_id, None)

    async def fire(self, job_id: str) -> None:
        _, callback, args = self.jobs.pop(job_id)
        await callback(*args)


class RecordingBroadcaster:
    def __init__(self):
        self.events: list[tuple[str, Any, Optional[str]]] = []
        self.fail = False

    async def publish(self, event, data, *, channel=None) -> None:
        if self.fail:
            raise ConnectionError("redis down")
        self.events.append((event, data, channel))

    async def close(self) -> None:
        return None

    def named(self, event: str) -> list[Any]:
        return [data for name, data, _ in self.events if name == event]


class RecordingGpio:
    def __init__(self, fail: bool = False):
        self.blinks: list[str] = []
        self.lamp: list[bool] = []
        self.fail = fail

    async def blink_direction(self, direction: str) -> None:
        if self.fail:
            raise DriverError("gpioset not found")
        self.blinks.append(direction)

    async def set_lamp(self, on: bool) -> None:
        if self.fail:
            raise DriverError("gpioset not found")
        self.lamp.append(on)


class RecordingAudio:
    def __init__(self, fail: bool = False):
        self.played: list[str] = []
        self.fail = fail

    async def play(self, kind: str) -> bool:
        if self.fail:
            raise DriverError("ffplay not found")
        self.played.append(kind)
        return True


class MemoryRoundStore(RoundStore):
    def __init__(self, state: Optional[RoundState] = None):
        self.state = state
        self.fail = False
        self.saves = 0

    async def init(self):
        return None

    async def close(self):
        return None

    async def load_round(self) -> Optional[RoundState]:
        return self.state

    async def save_round(self, state: RoundState) -> None:
        if self.fail:
            raise RoundStoreError("disk full")
        self.saves += 1
        self.state = state

    async def save_position(self, position: Position) -> None:
        if self.fail:
            raise RoundStoreError("disk full")
        self.saves += 1
        self.state = RoundState(position, self.state.objects, self.state.metric, self.state.round_number)


class MemorySchedulerStore(SchedulerStore):
    def __init__(self, queue: Optional[list[QueueEntry]] = None, session: Optional[Session] = None):
        self.queue = list(queue or [])
        self.session = session
        self.fail = False

    async def init(self):
        return None

    async def close(self):
        return None

    async def load_scheduler_state(self):
        return list(self.queue), self.session

    async def save_scheduler_state(self, queue, session) -> None:
        if self.fail:
            raise SchedulerStoreError("disk full")
        self.queue = list(queue)
        self.session = session


FOODS = [
    CatalogEntry(ObjectKind.NEGATIVE, "Donut", 45.0),
    CatalogEntry(ObjectKind.NEGATIVE, "Cola", 60.0),
    CatalogEntry(ObjectKind.NEGATIVE, "Bread", 25.0),
    CatalogEntry(ObjectKind.NEGATIVE, "Banana", 30.0),
    CatalogEntry(ObjectKind.NEGATIVE, "Apple", None),
]
EXERCISES = [
    CatalogEntry(ObjectKind.POSITIVE, "Walk", -25.0),
    CatalogEntry(ObjectKind.POSITIVE, "Jog", -40.0),
    CatalogEntry(ObjectKind.POSITIVE, "Yoga", None),
]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timer():
    return ManualTimer()


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def gpio():
    return RecordingGpio()


@pytest.fixture
def audio():
    return RecordingAudio()


@pytest.fixture
def generator():
    return WorldObjectGenerator(FOODS, EXERCISES, rng=random.Random(7))


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "claw.sqlite3")
