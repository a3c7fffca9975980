"""Periodic dashboard refresh driven by APScheduler."""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

JOB_ID = "dashboard-auto-refresh"


class AutoRefreshScheduler:
    """Runs ``tick`` every ``interval_seconds`` while the panel is visible.

    Pausing removes the job outright, so nothing piles up while hidden and
    resuming starts a fresh interval.
    """

    def __init__(
        self,
        tick: Callable[[], Awaitable[object]],
        interval_seconds: float = 30.0,
        scheduler: Optional[AsyncIOScheduler] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._tick = tick
        self.interval_seconds = interval_seconds
        self._scheduler = scheduler or AsyncIOScheduler()
        self._torn_down = False

    @property
    def job(self) -> Optional[Job]:
        return self._scheduler.get_job(JOB_ID)

    @property
    def paused(self) -> bool:
        return self.job is None

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def start(self) -> None:
        if self._torn_down:
            raise RuntimeError("scheduler has been torn down")
        if not self._scheduler.running:
            self._scheduler.start()
        self.resume()

    def pause(self) -> None:
        if self.job is not None:
            self._scheduler.remove_job(JOB_ID)
            logger.debug("Auto-refresh paused")

    def resume(self) -> None:
        if self._torn_down or self.job is not None:
            return
        self._scheduler.add_job(
            self._tick,
            IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            coalesce=True,
            max_instances=1,
        )
        logger.debug("Auto-refresh scheduled every %ss", self.interval_seconds)

    def teardown(self) -> None:
        if self._torn_down:
            return
        self._torn_down = True
        self.pause()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        logger.info("Auto-refresh stopped")
