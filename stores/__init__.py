# Abstractions
from .round_store import RoundStore
from .scheduler_store import SchedulerStore

# Exceptions
from .exceptions import (
    StoreError,
    RoundStoreError,
    SchedulerStoreError,
    StateCorrupted,
    UnexpectedResult,
)

# Concrete implementations are private; only abstract interfaces are exported.
from .sqlite_round_store import SqliteRoundStore as _SqliteRoundStore
from .sqlite_scheduler_store import SqliteSchedulerStore as _SqliteSchedulerStore

__all__ = [
    # Abstractions
    "RoundStore",
    "SchedulerStore",
    # Exceptions
    "StoreError",
    "RoundStoreError",
    "SchedulerStoreError",
    "StateCorrupted",
    "UnexpectedResult",
    # Factory
    "open_stores",
]


from db import ensure_db


async def open_stores(db_path: str) -> tuple[RoundStore, SchedulerStore]:
    """Create the schema if needed and return initialized (round, scheduler) stores.

    Each store owns its own connection; the caller closes both on shutdown.
    """
    await ensure_db(db_path)

    round_store = _SqliteRoundStore(db_path)
    await round_store.init()

    scheduler_store = _SqliteSchedulerStore(db_path)
    try:
        await scheduler_store.init()
    except Exception:
        await round_store.close()
        raise

    return round_store, scheduler_store
