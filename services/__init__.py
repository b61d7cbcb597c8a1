"""Services package: the two aggregates that own the claw's state.

- `game_state.GameState`: claw position, object layout, metric and lamp.
- `session_scheduler.SessionScheduler`: wait queue and the active session.
- `world_objects.WorldObjectGenerator`: random layouts for new rounds.
"""

from .exceptions import (
	CoreError,
	ValidationError,
	InvalidClientId,
	InvalidDirection,
	NotSessionHolder,
	DriverError,
)
from .world_objects import WorldObjectGenerator, load_catalog, parse_catalog
from .game_state import GameState, nearest_object
from .session_scheduler import SessionScheduler, normalize_client_id

__all__ = [
	"CoreError",
	"ValidationError",
	"InvalidClientId",
	"InvalidDirection",
	"NotSessionHolder",
	"DriverError",
	"WorldObjectGenerator",
	"load_catalog",
	"parse_catalog",
	"GameState",
	"nearest_object",
	"SessionScheduler",
	"normalize_client_id",
]
