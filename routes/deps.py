"""Dependency getters for route handlers.

`main.create_app()` builds the aggregates inside its lifespan and keeps
them on `app.state`; these resolve them per request.
"""
from fastapi import HTTPException, Request

from infrastructure.broadcast import Broadcaster
from services.game_state import GameState
from services.session_scheduler import SessionScheduler


def _state_attr(request: Request, name: str):
	value = getattr(request.app.state, name, None)
	if value is None:
		raise HTTPException(status_code=503, detail=f"{name} not ready")
	return value


def get_game(request: Request) -> GameState:
	return _state_attr(request, "game")


def get_scheduler(request: Request) -> SessionScheduler:
	return _state_attr(request, "scheduler")


def get_broadcaster(request: Request) -> Broadcaster:
	return _state_attr(request, "broadcaster")


def get_require_active_session(request: Request) -> bool:
	return bool(getattr(request.app.state, "require_active_session", True))
