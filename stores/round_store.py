from typing import Optional
from abc import ABC, abstractmethod

from models.domain_models import Position, RoundState


# =========================
# RoundStore Interface
# =========================

class RoundStore(ABC):
    """
    Durable copy of the single RoundState owned by `services.GameState`.

    Invariants:
    - A saved round is written atomically (position, metric and layout together)
    - Layout order is preserved; it is the grab tie-break order
    - Concurrency control lives in GameState; the store only guarantees atomic writes
    """

    @abstractmethod
    async def init(self) -> None:
        """Open the underlying connection. Call this after construction."""

    @abstractmethod
    async def close(self) -> None:
        """Close the underlying connection."""

    @abstractmethod
    async def load_round(self) -> Optional[RoundState]:
        """Return the persisted round, or None if nothing was saved yet.

        Raises:
            StateCorrupted: If the stored record cannot be decoded.
        """

    @abstractmethod
    async def save_round(self, state: RoundState) -> None:
        """Replace the persisted round with `state` in one transaction.

        Raises:
            RoundStoreError: If the write fails.
        """

    @abstractmethod
    async def save_position(self, position: Position) -> None:
        """Persist only the actuator position (the hot path for moves).

        Raises:
            RoundStoreError: If no round exists yet or the write fails.
        """
