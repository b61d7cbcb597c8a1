from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from models import ClientRequest
from services.exceptions import CoreError
from stores import StoreError
from .deps import get_scheduler
from . import command_helpers

router = APIRouter()


@router.get("/api/queue")
async def get_queue(scheduler = Depends(get_scheduler)):
	return JSONResponse(content=command_helpers.queue_state(scheduler))


@router.post("/api/queue/join")
async def join_queue(req: ClientRequest, scheduler = Depends(get_scheduler)):
	try:
		result = await command_helpers.join_queue(scheduler, req.client_id)
	except (CoreError, StoreError) as exc:
		return command_helpers.failure_response(exc)
	return JSONResponse(content=result)


@router.post("/api/queue/leave")
async def leave_queue(req: ClientRequest, scheduler = Depends(get_scheduler)):
	try:
		result = await command_helpers.leave_queue(scheduler, req.client_id)
	except (CoreError, StoreError) as exc:
		return command_helpers.failure_response(exc)
	return JSONResponse(content=result)
