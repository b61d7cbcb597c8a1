"""
Turn arbitration for the shared claw.

One client at a time holds a time-boxed Session; everyone else waits in a
FIFO queue. All reads and writes of the queue/session go through one
asyncio.Lock, and every change is persisted before it is adopted in memory,
so a failed write leaves the scheduler exactly as it was. `queue-update`
is published before the lock is released, so subscribers see snapshots in
the order the changes were made.
"""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Optional

import config
from models.domain_models import (
	JoinResult,
	LeaveResult,
	QueueEntry,
	QueueSnapshot,
	Session,
)
from stores import SchedulerStore
from utils.time import from_ms, now_ms, remaining_seconds
from utils.validation import is_valid_client_id
from .exceptions import InvalidClientId

if TYPE_CHECKING:
	from infrastructure.broadcast import Broadcaster
	from infrastructure.timers import ExpiryTimer

logger = logging.getLogger(__name__)

EXPIRY_JOB_ID = "session-expiry"


def normalize_client_id(client_id: Optional[str]) -> str:
	"""Strip and validate a client id.

	Raises:
		InvalidClientId: if the id is missing or malformed.
	"""
	if not is_valid_client_id(client_id):
		raise InvalidClientId("clientId is missing or invalid")
	return client_id.strip()


class SessionScheduler:
	"""Owns the wait queue and the single active session."""

	def __init__(
		self,
		store: SchedulerStore,
		timer: "ExpiryTimer",
		*,
		broadcaster: Optional["Broadcaster"] = None,
		duration_ms: int = config.SESSION_SECONDS * 1000,
		grace_ms: int = config.EXPIRY_GRACE_MS,
		clock: Callable[[], int] = now_ms,
	):
		self._store = store
		self._timer = timer
		self._broadcaster = broadcaster
		self.duration_ms = duration_ms
		self.grace_ms = grace_ms
		self._clock = clock
		self._queue: list[QueueEntry] = []
		self._active: Optional[Session] = None
		self._lock = asyncio.Lock()

	# -------------------------------------------------
	# Read side
	# -------------------------------------------------

	@property
	def active_session(self) -> Optional[Session]:
		return self._active

	def snapshot(self) -> QueueSnapshot:
		return self._snapshot(self._clock())

	def is_active(self, client_id: Optional[str]) -> bool:
		"""True if `client_id` holds a session that has not expired yet."""
		active = self._active
		return (
			active is not None
			and client_id is not None
			and active.client_id == client_id.strip()
			and self._clock() < active.expires_at
		)

	def _snapshot(self, now: int) -> QueueSnapshot:
		active = self._active
		return QueueSnapshot(
			queue=tuple(entry.client_id for entry in self._queue),
			active_client_id=active.client_id if active else None,
			remaining_seconds=remaining_seconds(active.expires_at, now) if active else 0,
		)

	def _position(self, client_id: str) -> int:
		for index, entry in enumerate(self._queue, start=1):
			if entry.client_id == client_id:
				return index
		return 0

	# -------------------------------------------------
	# State transitions (call with the lock held)
	# -------------------------------------------------

	def _promoted(
		self,
		queue: list[QueueEntry],
		active: Optional[Session],
		now: int,
	) -> tuple[list[QueueEntry], Optional[Session]]:
		"""Pop the queue head into a new session if the claw is free."""
		if active is not None or not queue:
			return queue, active
		head, rest = queue[0], queue[1:]
		return rest, Session(head.client_id, now + self.duration_ms)

	async def _commit(self, queue: list[QueueEntry], active: Optional[Session]) -> None:
		"""Persist, then adopt, a new queue/session and keep the timer in step."""
		await self._store.save_scheduler_state(queue, active)
		previous = self._active
		self._queue = queue
		self._active = active
		if active is None:
			if previous is not None:
				self._timer.cancel(EXPIRY_JOB_ID)
		elif active != previous:
			logger.info(
				f"[SCHEDULER] {active.client_id} granted the claw until {from_ms(active.expires_at).isoformat()}"
			)
			self._arm(active)

	def _arm(self, session: Session) -> None:
		self._timer.arm(
			EXPIRY_JOB_ID,
			from_ms(session.expires_at + self.grace_ms),
			self.expire,
			session,
		)

	async def _reap_expired(self, now: int) -> None:
		"""Clear a session whose time is up but whose timer has not fired yet."""
		active = self._active
		if active is not None and now >= active.expires_at:
			logger.info(f"[SCHEDULER] session for {active.client_id} expired")
			queue, promoted = self._promoted(list(self._queue), None, now)
			await self._commit(queue, promoted)

	async def _broadcast(self, snapshot: QueueSnapshot) -> None:
		if self._broadcaster is None:
			return
		try:
			await self._broadcaster.publish("queue-update", snapshot.to_payload())
		except Exception as exc:
			logger.error(f"[SCHEDULER] queue-update broadcast failed: {exc}")

	# -------------------------------------------------
	# Operations
	# -------------------------------------------------

	async def load(self) -> QueueSnapshot:
		"""Restore queue and session from the store after a restart."""
		async with self._lock:
			queue, active = await self._store.load_scheduler_state()
			now = self._clock()
			self._queue = list(queue)
			self._active = active
			if active is not None and now < active.expires_at:
				logger.info(
					f"[SCHEDULER] resumed session for {active.client_id} "
					f"({remaining_seconds(active.expires_at, now)}s left, {len(queue)} waiting)"
				)
				self._arm(active)
			else:
				if active is not None:
					logger.info(f"[SCHEDULER] session for {active.client_id} expired while offline")
					self._active = None
				await self._commit(*self._promoted(list(self._queue), None, now))
			snapshot = self._snapshot(now)
			await self._broadcast(snapshot)
		return snapshot

	async def join(self, client_id: Optional[str]) -> JoinResult:
		"""Queue a client, or report its existing slot/session.

		A client that already holds a live session gets its session back with
		the remaining time computed from the stored expiry (reconnect).

		Raises:
			InvalidClientId: if `client_id` is missing or malformed.
		"""
		client_id = normalize_client_id(client_id)
		async with self._lock:
			now = self._clock()
			await self._reap_expired(now)

			active = self._active
			if active is not None and active.client_id == client_id:
				logger.info(f"[SCHEDULER] {client_id} reconnected to its session")
				result = JoinResult(
					client_id, active=True, position=0,
					remaining=remaining_seconds(active.expires_at, now), reconnected=True,
				)
			elif self._position(client_id):
				result = JoinResult(client_id, active=False, position=self._position(client_id), remaining=0)
			else:
				queue = self._queue + [QueueEntry(client_id, now)]
				await self._commit(*self._promoted(queue, self._active, now))
				if self._active is not None and self._active.client_id == client_id:
					result = JoinResult(
						client_id, active=True, position=0,
						remaining=remaining_seconds(self._active.expires_at, now),
					)
				else:
					logger.info(f"[SCHEDULER] {client_id} queued at position {self._position(client_id)}")
					result = JoinResult(client_id, active=False, position=self._position(client_id), remaining=0)
			await self._broadcast(self._snapshot(now))
		return result

	async def leave(self, client_id: Optional[str]) -> LeaveResult:
		"""Drop a client from the queue and release its session if it holds one.

		Leaving when neither queued nor active is a no-op that still
		re-broadcasts the snapshot.

		Raises:
			InvalidClientId: if `client_id` is missing or malformed.
		"""
		client_id = normalize_client_id(client_id)
		async with self._lock:
			now = self._clock()
			await self._reap_expired(now)

			was_queued = self._position(client_id) > 0
			was_active = self._active is not None and self._active.client_id == client_id
			if was_queued or was_active:
				queue = [entry for entry in self._queue if entry.client_id != client_id]
				active = None if was_active else self._active
				await self._commit(*self._promoted(queue, active, now))
				logger.info(f"[SCHEDULER] {client_id} left (active={was_active}, queued={was_queued})")
			await self._broadcast(self._snapshot(now))
		return LeaveResult(client_id, was_active=was_active, was_queued=was_queued)

	async def expire(self, session: Session) -> None:
		"""Expiry timer callback. Only acts if `session` is still the active one."""
		async with self._lock:
			if self._active != session:
				logger.debug(f"[SCHEDULER] stale expiry timer for {session.client_id} ignored")
				return
			now = self._clock()
			if now < session.expires_at:
				# Fired early (clock drift); try again at the real expiry
				self._arm(session)
				return
			logger.info(f"[SCHEDULER] session for {session.client_id} timed out")
			await self._commit(*self._promoted(list(self._queue), None, now))
			await self._broadcast(self._snapshot(now))
