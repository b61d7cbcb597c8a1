from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def liveness():
	"""Liveness probe for the kiosk supervisor."""
	return "claw core running"
