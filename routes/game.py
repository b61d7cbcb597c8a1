from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging

from models import InitGameRequest, MoveRequest, GrabRequest
from services.exceptions import CoreError
from stores import StoreError
from .deps import get_game, get_scheduler, get_require_active_session
from . import command_helpers

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/game_state")
async def get_game_state(game = Depends(get_game)):
	return JSONResponse(content=command_helpers.game_state(game))


@router.post("/api/init_game")
async def init_game(req: InitGameRequest, game = Depends(get_game)):
	try:
		result = await command_helpers.init_game(game, req.force_new, req.source)
	except (CoreError, StoreError) as exc:
		return command_helpers.failure_response(exc)
	return JSONResponse(content=result)


@router.post("/api/move")
async def move(
	req: MoveRequest,
	game = Depends(get_game),
	scheduler = Depends(get_scheduler),
	require_session: bool = Depends(get_require_active_session),
):
	try:
		result = await command_helpers.move(game, scheduler, req.client_id, req.direction, require_session)
	except (CoreError, StoreError) as exc:
		logger.info(f"move rejected: {exc}")
		return command_helpers.failure_response(exc)
	return JSONResponse(content=result)


@router.post("/api/grab")
async def grab(
	req: GrabRequest,
	game = Depends(get_game),
	scheduler = Depends(get_scheduler),
	require_session: bool = Depends(get_require_active_session),
):
	try:
		result = await command_helpers.grab(
			game, scheduler, req.client_id, req.active, req.coordinates(), require_session
		)
	except (CoreError, StoreError) as exc:
		logger.info(f"grab rejected: {exc}")
		return command_helpers.failure_response(exc)
	return JSONResponse(content=result)
