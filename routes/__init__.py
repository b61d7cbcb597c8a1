"""HTTP route modules (FastAPI routers) for the application.

This file explicitly exports the router objects provided by each
submodule so callers can do:

	from routes import game_router
	app.include_router(game_router)

Submodules should expose an `APIRouter` named `router`.
"""

from .events import router as events_router
from .game import router as game_router
from .queue import router as queue_router
from .health import router as health_router

__all__ = [
	"events_router",
	"game_router",
	"queue_router",
	"health_router",
]
