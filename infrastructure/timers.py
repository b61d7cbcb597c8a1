"""One-shot expiry timers backed by APScheduler's AsyncIOScheduler."""
from datetime import datetime
from typing import Any, Awaitable, Callable
import logging

import pytz
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)


class ExpiryTimer:
    """Arms coroutine callbacks to run once at a given time.

    Jobs are keyed by id: arming an id that is already armed replaces the
    earlier job, and cancelling an unknown id is a no-op.
    """

    def __init__(self, scheduler: AsyncIOScheduler | None = None):
        self._scheduler = scheduler or AsyncIOScheduler(timezone=pytz.utc)

    def start(self) -> None:
        """Start the scheduler; must be called from inside the running event loop."""
        if not self._scheduler.running:
            self._scheduler.start()

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    def arm(
        self,
        job_id: str,
        run_at: datetime,
        callback: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> None:
        self._scheduler.add_job(
            callback,
            trigger="date",
            run_date=run_at,
            args=list(args),
            id=job_id,
            replace_existing=True,
            misfire_grace_time=None,  # a late expiry must still run
        )
        logger.debug(f"[TIMER] armed {job_id} for {run_at.isoformat()}")

    def cancel(self, job_id: str) -> None:
        try:
            self._scheduler.remove_job(job_id)
            logger.debug(f"[TIMER] cancelled {job_id}")
        except JobLookupError:
            pass
