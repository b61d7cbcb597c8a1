"""Pydantic request models for the FastAPI endpoints.

The browser front-ends send camelCase keys (`clientId`, `clawX`), so every
model accepts both the alias and the field name. Keep transport concerns
(validation, docs) here and keep domain types in `models.domain_models`.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from typing import Any


class _RequestModel(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SendEventRequest(_RequestModel):
	channel: str | None = None
	event: str
	data: dict[str, Any] = Field(default_factory=dict)


class ClientRequest(_RequestModel):
	client_id: str | None = Field(default=None, alias="clientId")


class InitGameRequest(_RequestModel):
	source: str | None = None
	force_new: bool = Field(default=False, alias="forceNew")


class MoveRequest(ClientRequest):
	direction: str | None = None


class GrabRequest(ClientRequest):
	active: bool = True
	claw_x: float | None = Field(default=None, alias="clawX")
	claw_y: float | None = Field(default=None, alias="clawY")

	def coordinates(self) -> tuple[float, float] | None:
		if self.claw_x is None or self.claw_y is None:
			return None
		return (self.claw_x, self.claw_y)


__all__ = [
	"SendEventRequest",
	"ClientRequest",
	"InitGameRequest",
	"MoveRequest",
	"GrabRequest",
]
