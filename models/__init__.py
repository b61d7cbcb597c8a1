"""Data models used by the application.

Split into:
- `api_models`: Pydantic models used for request validation
- `domain_models`: immutable domain objects used by services and stores

Import submodules to make them available as `models.api_models`.
"""

from . import api_models, domain_models

# Re-export API models (Pydantic models used for requests)
from .api_models import (
	SendEventRequest,
	ClientRequest,
	InitGameRequest,
	MoveRequest,
	GrabRequest,
)

# Re-export domain models
from .domain_models import (
	DEFAULT_IMPACT,
	ObjectKind,
	Position,
	CatalogEntry,
	WorldObject,
	RoundState,
	Session,
	QueueEntry,
	QueueSnapshot,
	JoinResult,
	LeaveResult,
	MoveResult,
	GrabResult,
)

__all__ = [
	# submodules
	"api_models",
	"domain_models",
	# api models
	"SendEventRequest",
	"ClientRequest",
	"InitGameRequest",
	"MoveRequest",
	"GrabRequest",
	# domain models
	"DEFAULT_IMPACT",
	"ObjectKind",
	"Position",
	"CatalogEntry",
	"WorldObject",
	"RoundState",
	"Session",
	"QueueEntry",
	"QueueSnapshot",
	"JoinResult",
	"LeaveResult",
	"MoveResult",
	"GrabResult",
]
