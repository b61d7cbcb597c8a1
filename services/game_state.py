# game_state.py
"""
Authoritative claw game state: actuator position, object layout and the
blood-glucose style metric that drives the sugar lamp.

Every mutation runs under one asyncio.Lock and is persisted before it is
adopted, so two grabs can never capture the same object and two moves can
never lose an update. Hardware side effects and broadcasts are best-effort:
their failures are logged and never undo a committed state change.
"""
from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Iterable, Optional

from models.domain_models import (
    GrabResult,
    MoveResult,
    Position,
    RoundState,
    WorldObject,
)
from stores import RoundStore
from .world_objects import WorldObjectGenerator

if TYPE_CHECKING:
    from infrastructure.audio import SoundPlayer
    from infrastructure.broadcast import Broadcaster
    from infrastructure.gpio import GpioController

logger = logging.getLogger(__name__)

MOVE_STEP = 20
POSITION_BOUND = 120
CENTER_OFFSET = 130  # centered claw space -> layout space
CAPTURE_RADIUS = 40

METRIC_MIN = 60
METRIC_MAX = 250
METRIC_BASELINE = 100
LAMP_THRESHOLD = 200

# Screen coordinates: "up" decreases y
DIRECTIONS = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def nearest_object(
    objects: Iterable[WorldObject],
    point: tuple[float, float],
) -> tuple[Optional[WorldObject], float]:
    """Return the object closest to `point` and its distance.

    Ties go to the object that comes first in iteration order (strict `<`).
    Returns (None, inf) for an empty layout.
    """
    px, py = point
    nearest = None
    nearest_dist = math.inf
    for obj in objects:
        dist = math.hypot(px - obj.x, py - obj.y)
        if dist < nearest_dist:
            nearest = obj
            nearest_dist = dist
    return nearest, nearest_dist


def lamp_for(metric: float) -> bool:
    return metric > LAMP_THRESHOLD


class GameState:
    """Owns the RoundState and exposes move / grab / init_round."""

    def __init__(
        self,
        store: RoundStore,
        generator: WorldObjectGenerator,
        *,
        broadcaster: Optional["Broadcaster"] = None,
        gpio: Optional["GpioController"] = None,
        audio: Optional["SoundPlayer"] = None,
    ):
        self._store = store
        self._generator = generator
        self._broadcaster = broadcaster
        self._gpio = gpio
        self._audio = audio
        self._state: Optional[RoundState] = None
        self._lock = asyncio.Lock()

    # -------------------------------------------------
    # Helpers
    # -------------------------------------------------

    def snapshot(self) -> RoundState:
        if self._state is None:
            raise RuntimeError("GameState not loaded; call load() first")
        return self._state

    def _fresh_round(self, metric: float, round_number: int) -> RoundState:
        return RoundState(
            position=Position(0, 0),
            objects=tuple(self._generator.generate()),
            metric=metric,
            round_number=round_number,
        )

    async def _publish(self, event: str, data: Any) -> None:
        if self._broadcaster is None:
            return
        try:
            await self._broadcaster.publish(event, data)
        except Exception as exc:
            logger.error(f"[GAME] broadcast of '{event}' failed: {exc}")

    async def _signal(self, cue: str) -> None:
        """Blink the LED and play the sound for `cue`; failures are only logged."""
        if self._gpio is not None:
            try:
                await self._gpio.blink_direction(cue)
            except Exception as exc:
                logger.warning(f"[GAME] {cue} GPIO failed: {exc}")
        if self._audio is not None:
            try:
                await self._audio.play("grab" if cue == "grab" else "move")
            except Exception as exc:
                logger.warning(f"[GAME] {cue} audio failed: {exc}")

    async def _push_lamp(self, on: bool) -> None:
        if self._gpio is None:
            return
        try:
            await self._gpio.set_lamp(on)
        except Exception as exc:
            logger.warning(f"[GAME] sugar lamp {'on' if on else 'off'} failed: {exc}")

    # -------------------------------------------------
    # Operations
    # -------------------------------------------------

    async def load(self) -> RoundState:
        """Resume the persisted round, or start one if none (or empty) is stored."""
        async with self._lock:
            state = await self._store.load_round()
            if state is None or not state.objects:
                metric = state.metric if state is not None else METRIC_BASELINE
                number = state.round_number + 1 if state is not None else 1
                state = self._fresh_round(metric, number)
                await self._store.save_round(state)
                logger.info(f"[GAME] started round {state.round_number} with {len(state.objects)} objects")
            else:
                logger.info(
                    f"[GAME] resumed round {state.round_number}: {len(state.objects)} objects left, "
                    f"claw at ({state.position.x}, {state.position.y}), metric {state.metric}"
                )
            self._state = state
            await self._push_lamp(lamp_for(state.metric))
        return state

    async def init_round(self, force_new: bool = False, source: Optional[str] = None) -> RoundState:
        """Return the current round, generating a new layout only if forced or empty.

        Every call re-publishes `objects-init` so a (re)connecting client can sync.
        """
        async with self._lock:
            current = self.snapshot()
            if current.objects and not force_new:
                state = current
            else:
                state = self._fresh_round(current.metric, current.round_number + 1)
                await self._store.save_round(state)
                self._state = state
                logger.info(f"[GAME] new round {state.round_number} (forced={force_new}, source={source})")
            await self._publish("objects-init", [obj.to_payload() for obj in state.objects])
        return state

    async def move(self, direction: Optional[str]) -> MoveResult:
        """Step the claw one unit in `direction`, clamped to the play area.

        Unknown directions leave the state untouched and return `moved=False`.
        """
        key = direction.strip().lower() if isinstance(direction, str) else ""
        delta = DIRECTIONS.get(key)
        if delta is None:
            logger.warning(f"[GAME] ignoring unknown direction {direction!r}")
            return MoveResult(direction=str(direction), position=self.snapshot().position, moved=False)

        async with self._lock:
            current = self.snapshot()
            position = Position(
                clamp(current.position.x + delta[0] * MOVE_STEP, -POSITION_BOUND, POSITION_BOUND),
                clamp(current.position.y + delta[1] * MOVE_STEP, -POSITION_BOUND, POSITION_BOUND),
            )
            if position != current.position:
                await self._store.save_position(position)
                self._state = replace(current, position=position)
            await self._publish("move", {"direction": key, "position": position.to_payload()})

        await self._signal(key)
        return MoveResult(direction=key, position=position, moved=True)

    async def grab(
        self,
        active: bool = True,
        coordinates: Optional[tuple[float, float]] = None,
    ) -> GrabResult:
        """Close the claw and capture the nearest object within CAPTURE_RADIUS.

        `active=False` is the release half of a grab and changes nothing.
        `coordinates` from the client are advisory; the server position wins.
        """
        if not active:
            state = self.snapshot()
            return GrabResult(
                active=False, position=state.position,
                metric=state.metric, lamp=lamp_for(state.metric),
            )

        await self._signal("grab")

        async with self._lock:
            current = self.snapshot()
            claw = (current.position.x + CENTER_OFFSET, current.position.y + CENTER_OFFSET)
            if coordinates is not None and (
                abs(coordinates[0] - claw[0]) > 1e-6 or abs(coordinates[1] - claw[1]) > 1e-6
            ):
                logger.debug(f"[GAME] client claw {coordinates} differs from server {claw}; using server")

            nearest, distance = nearest_object(current.objects, claw)
            if nearest is None or distance >= CAPTURE_RADIUS:
                logger.info("[GAME] no object close enough to grab")
                return GrabResult(
                    active=True, position=current.position, metric=current.metric,
                    lamp=lamp_for(current.metric),
                    distance=None if nearest is None else distance,
                )

            impact = nearest.signed_impact()
            metric = clamp(current.metric + impact, METRIC_MIN, METRIC_MAX)
            remaining = tuple(obj for obj in current.objects if obj.object_id != nearest.object_id)
            new_round = not remaining
            if new_round:
                state = self._fresh_round(metric, current.round_number + 1)
            else:
                state = replace(current, objects=remaining, metric=metric)

            await self._store.save_round(state)
            self._state = state
            logger.info(
                f"[GAME] grabbed {nearest.kind.value} '{nearest.label}' at {distance:.1f}: "
                f"metric {current.metric} -> {metric}"
            )

            await self._publish("object-grabbed", nearest.to_payload())
            await self._publish("bg-impact", {
                "kind": nearest.kind.value,
                "type": nearest.kind.legacy_type,
                "label": nearest.label,
                "name": nearest.label,
                "impact": impact,
                "metric": metric,
            })
            if new_round:
                logger.info(f"[GAME] round finished; starting round {state.round_number}")
                await self._publish("objects-init", [obj.to_payload() for obj in state.objects])

            # Lamp pushes are applied in metric order
            lamp = lamp_for(metric)
            await self._push_lamp(lamp)

        return GrabResult(
            active=True,
            position=state.position,
            metric=metric,
            lamp=lamp,
            captured=nearest,
            distance=distance,
            impact=impact,
            new_round=new_round,
        )
