from typing import Optional
from abc import ABC, abstractmethod

from models.domain_models import QueueEntry, Session


# =========================
# SchedulerStore Interface
# =========================

class SchedulerStore(ABC):
    """
    Durable copy of the wait queue and the active session owned by
    `services.SessionScheduler`.

    Invariants:
    - Queue and session are written together in one transaction
    - Queue order is preserved exactly as given
    - A missing session row means idle
    """

    @abstractmethod
    async def init(self) -> None:
        """Open the underlying connection. Call this after construction."""

    @abstractmethod
    async def close(self) -> None:
        """Close the underlying connection."""

    @abstractmethod
    async def load_scheduler_state(self) -> tuple[list[QueueEntry], Optional[Session]]:
        """Return (queue in order, active session or None).

        Raises:
            StateCorrupted: If the stored record cannot be decoded.
        """

    @abstractmethod
    async def save_scheduler_state(
        self,
        queue: list[QueueEntry],
        session: Optional[Session],
    ) -> None:
        """Replace the persisted queue and session in one transaction.

        Raises:
            SchedulerStoreError: If the write fails.
        """
