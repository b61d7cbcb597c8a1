"""Domain-level models used by services and stores.

Everything here is an immutable dataclass: the aggregates in `services`
build a new value, persist it, and only then swap it in. `to_payload()`
produces the JSON shape used in responses and broadcast notifications.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_IMPACT = 20.0


class ObjectKind(str, Enum):
	NEGATIVE = "negative"  # food: raises the metric
	POSITIVE = "positive"  # exercise: lowers the metric

	@property
	def legacy_type(self) -> str:
		return "food" if self is ObjectKind.NEGATIVE else "exercise"

	@property
	def color(self) -> str:
		return "bg-red-500" if self is ObjectKind.NEGATIVE else "bg-green-500"


@dataclass(frozen=True)
class Position:
	x: float = 0.0
	y: float = 0.0

	def to_payload(self) -> dict[str, float]:
		return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class CatalogEntry:
	kind: ObjectKind
	label: str
	impact: float | None = None


@dataclass(frozen=True)
class WorldObject:
	object_id: str
	kind: ObjectKind
	label: str
	impact: float | None
	x: float
	y: float

	def signed_impact(self, default: float = DEFAULT_IMPACT) -> float:
		"""Metric delta for capturing this object.

		The sign is fixed by kind regardless of how the catalog wrote it.
		"""
		magnitude = abs(self.impact) if self.impact is not None else default
		return magnitude if self.kind is ObjectKind.NEGATIVE else -magnitude

	def to_payload(self) -> dict[str, Any]:
		return {
			"id": self.object_id,
			"kind": self.kind.value,
			"type": self.kind.legacy_type,
			"label": self.label,
			"impact": self.impact,
			"color": self.kind.color,
			"x": self.x,
			"y": self.y,
		}


@dataclass(frozen=True)
class RoundState:
	position: Position
	objects: tuple[WorldObject, ...]
	metric: float
	round_number: int = 1

	def to_payload(self) -> dict[str, Any]:
		return {
			"clawPos": self.position.to_payload(),
			"gameObjects": [obj.to_payload() for obj in self.objects],
			"metric": self.metric,
			"round": self.round_number,
		}


@dataclass(frozen=True)
class Session:
	client_id: str
	expires_at: int  # epoch milliseconds


@dataclass(frozen=True)
class QueueEntry:
	client_id: str
	joined_at: int  # epoch milliseconds


@dataclass(frozen=True)
class QueueSnapshot:
	queue: tuple[str, ...]
	active_client_id: str | None
	remaining_seconds: int

	def to_payload(self) -> dict[str, Any]:
		return {
			"queue": [
				{"clientId": client_id, "position": index}
				for index, client_id in enumerate(self.queue, start=1)
			],
			"activeClientId": self.active_client_id,
			"remainingSeconds": self.remaining_seconds,
		}


@dataclass(frozen=True)
class JoinResult:
	client_id: str
	active: bool
	position: int  # 0 when active, otherwise 1-based queue position
	remaining: int  # seconds left for this client's own session
	reconnected: bool = False

	def to_payload(self) -> dict[str, Any]:
		return {
			"clientId": self.client_id,
			"active": self.active,
			"position": self.position,
			"remaining": self.remaining,
			"reconnected": self.reconnected,
		}


@dataclass(frozen=True)
class LeaveResult:
	client_id: str
	was_active: bool
	was_queued: bool

	def to_payload(self) -> dict[str, Any]:
		return {
			"clientId": self.client_id,
			"wasActive": self.was_active,
			"wasQueued": self.was_queued,
		}


@dataclass(frozen=True)
class MoveResult:
	direction: str
	position: Position
	moved: bool

	def to_payload(self) -> dict[str, Any]:
		return {
			"direction": self.direction,
			"position": self.position.to_payload(),
			"moved": self.moved,
		}


@dataclass(frozen=True)
class GrabResult:
	active: bool
	position: Position
	metric: float
	lamp: bool
	captured: WorldObject | None = None
	distance: float | None = None
	impact: float | None = None
	new_round: bool = False

	def to_payload(self) -> dict[str, Any]:
		payload: dict[str, Any] = {
			"active": self.active,
			"captured": self.captured.to_payload() if self.captured else None,
			"message": "captured" if self.captured else "nothing captured",
			"position": self.position.to_payload(),
			"metric": self.metric,
			"lamp": self.lamp,
			"newRound": self.new_round,
		}
		if self.distance is not None:
			payload["distance"] = self.distance
		if self.impact is not None:
			payload["impact"] = self.impact
		return payload


__all__ = [
	"DEFAULT_IMPACT",
	"ObjectKind",
	"Position",
	"CatalogEntry",
	"WorldObject",
	"RoundState",
	"Session",
	"QueueEntry",
	"QueueSnapshot",
	"JoinResult",
	"LeaveResult",
	"MoveResult",
	"GrabResult",
]
