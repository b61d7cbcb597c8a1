from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import logging
import pydantic

from models import SendEventRequest, InitGameRequest, MoveRequest, GrabRequest, ClientRequest
from services.exceptions import CoreError
from stores import StoreError
from .deps import get_game, get_scheduler, get_broadcaster, get_require_active_session
from . import command_helpers

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/send-event")
async def send_event(
	req: SendEventRequest,
	game = Depends(get_game),
	scheduler = Depends(get_scheduler),
	broadcaster = Depends(get_broadcaster),
	require_session: bool = Depends(get_require_active_session),
):
	"""Single entry point used by the joystick pages.

	Known events are commands; anything else is relayed to subscribers.
	"""
	event = req.event.strip()
	data = req.data
	logger.debug(f"send-event '{event}' on {req.channel}: {data}")

	try:
		if not event:
			raise ValueError("event name is required")

		if event == "init-game":
			body = InitGameRequest.model_validate(data)
			result = await command_helpers.init_game(game, body.force_new, body.source)
		elif event == "move":
			body = MoveRequest.model_validate(data)
			result = await command_helpers.move(
				game, scheduler, body.client_id, body.direction, require_session
			)
		elif event == "grab":
			body = GrabRequest.model_validate(data)
			result = await command_helpers.grab(
				game, scheduler, body.client_id, body.active, body.coordinates(), require_session
			)
		elif event == "join-queue":
			body = ClientRequest.model_validate(data)
			result = await command_helpers.join_queue(scheduler, body.client_id)
		elif event == "leave-queue":
			body = ClientRequest.model_validate(data)
			result = await command_helpers.leave_queue(scheduler, body.client_id)
		else:
			result = await command_helpers.forward_event(broadcaster, event, data, req.channel)
	except (CoreError, StoreError, pydantic.ValidationError, ValueError) as exc:
		logger.info(f"send-event '{event}' rejected: {exc}")
		return command_helpers.failure_response(exc)

	return JSONResponse(content=result)
