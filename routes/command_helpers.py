"""
Claw command business logic helpers.

These functions are shared by the REST routes (routes/game.py,
routes/queue.py) and the `/send-event` dispatcher (routes/events.py).
They operate on the aggregates, not on HTTP requests, and return the
JSON-ready dicts the browser clients expect.
"""

import logging
from typing import Any, Dict, Optional

import pydantic
from fastapi.responses import JSONResponse

from infrastructure.broadcast import Broadcaster
from services.exceptions import CoreError, InvalidDirection, NotSessionHolder
from services.game_state import GameState
from services.session_scheduler import SessionScheduler, normalize_client_id
from stores import StoreError
from utils.validation import sanitize_json

logger = logging.getLogger(__name__)


def failure_response(exc: Exception) -> JSONResponse:
    """Map a command failure to `{"success": false, ...}` with a fitting status."""
    if isinstance(exc, CoreError):
        status, retryable = exc.status_code, exc.retryable
    elif isinstance(exc, StoreError):
        status, retryable = (503 if exc.retryable else 500), exc.retryable
    elif isinstance(exc, (pydantic.ValidationError, ValueError)):
        status, retryable = 400, False
    else:
        status, retryable = 500, False
    if status >= 500:
        logger.error(f"Command failed: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status,
        content={"success": False, "error": str(exc), "retryable": retryable},
    )


def ensure_session_holder(
    scheduler: SessionScheduler,
    client_id: Optional[str],
    required: bool = True,
) -> None:
    """
    Reject movement commands from anyone but the active session holder.

    Raises:
        InvalidClientId: if `client_id` is missing or malformed
        NotSessionHolder: if the client does not hold a live session
    """
    if not required:
        return
    client_id = normalize_client_id(client_id)
    if not scheduler.is_active(client_id):
        raise NotSessionHolder(f"{client_id} does not hold the claw")


async def init_game(
    game: GameState,
    force_new: bool = False,
    source: Optional[str] = None,
) -> Dict[str, Any]:
    state = await game.init_round(force_new=force_new, source=source)
    return {"success": True, **state.to_payload()}


def game_state(game: GameState) -> Dict[str, Any]:
    return {"success": True, **game.snapshot().to_payload()}


async def move(
    game: GameState,
    scheduler: SessionScheduler,
    client_id: Optional[str],
    direction: Optional[str],
    require_session: bool = True,
) -> Dict[str, Any]:
    """
    Move the claw one step for the session holder.

    Raises:
        NotSessionHolder: if someone else holds the claw
        InvalidDirection: if `direction` is not up/down/left/right
    """
    ensure_session_holder(scheduler, client_id, require_session)
    result = await game.move(direction)
    if not result.moved:
        raise InvalidDirection(f"invalid direction {direction!r}")
    return {"success": True, **result.to_payload()}


async def grab(
    game: GameState,
    scheduler: SessionScheduler,
    client_id: Optional[str],
    active: bool = True,
    coordinates: Optional[tuple[float, float]] = None,
    require_session: bool = True,
) -> Dict[str, Any]:
    """
    Close (active) or release the claw for the session holder.

    A grab that catches nothing still succeeds with "nothing captured".
    """
    ensure_session_holder(scheduler, client_id, require_session)
    result = await game.grab(active=active, coordinates=coordinates)
    return {"success": True, **result.to_payload()}


async def join_queue(scheduler: SessionScheduler, client_id: Optional[str]) -> Dict[str, Any]:
    result = await scheduler.join(client_id)
    return {"success": True, **result.to_payload()}


async def leave_queue(scheduler: SessionScheduler, client_id: Optional[str]) -> Dict[str, Any]:
    result = await scheduler.leave(client_id)
    return {"success": True, **result.to_payload()}


def queue_state(scheduler: SessionScheduler) -> Dict[str, Any]:
    return {"success": True, **scheduler.snapshot().to_payload()}


async def forward_event(
    broadcaster: Broadcaster,
    event: str,
    data: Any,
    channel: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Relay an event the server does not handle itself to the subscribers.

    Raises:
        ValueError: if `data` is not plain, reasonably shallow JSON
    """
    clean = sanitize_json(data)
    await broadcaster.publish(event, clean, channel=channel)
    logger.debug(f"Forwarded '{event}' to {channel or 'default channel'}")
    return {"success": True, "event": event, "forwarded": True}
