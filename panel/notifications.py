"""Timed user-facing notifications.

The queue holds a single slot: pushing a notification dismisses the one on
screen, and each notification removes itself after ``ttl_seconds``.
Show, dismiss and expiry run under one lock, so a notification is never
dismissed while the sink is still showing it.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from models import Notification, Severity
from panel.view import NotificationSink

logger = logging.getLogger(__name__)


class NotificationQueue:
    def __init__(self, sink: Optional[NotificationSink] = None, ttl_seconds: float = 5.0) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.sink = sink
        self.ttl_seconds = ttl_seconds
        self._current: Optional[Notification] = None
        self._expiry: Optional[asyncio.Task[None]] = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> Optional[Notification]:
        return self._current

    async def push(self, message: str, severity: Severity = Severity.INFO) -> Notification:
        notification = Notification(message=message, severity=Severity(severity))
        async with self._lock:
            await self._dismiss_current()
            self._current = notification
            self._expiry = asyncio.create_task(self._expire(notification))
            logger.info("[%s] %s", notification.severity.value, message)
            await self._show(notification)
        return notification

    async def clear(self) -> None:
        async with self._lock:
            await self._dismiss_current()

    async def _dismiss_current(self) -> None:
        # caller holds the lock
        expiry, self._expiry = self._expiry, None
        if expiry is not None and not expiry.done():
            expiry.cancel()
        current, self._current = self._current, None
        if current is not None:
            await self._dismiss(current)

    async def _expire(self, notification: Notification) -> None:
        await asyncio.sleep(self.ttl_seconds)
        async with self._lock:
            if self._current is not notification:
                return
            self._current = None
            self._expiry = None
            await self._dismiss(notification)

    async def _show(self, notification: Notification) -> None:
        if self.sink is None:
            return
        try:
            await self.sink.show_notification(notification)
        except Exception:
            logger.exception("Failed to show notification")

    async def _dismiss(self, notification: Notification) -> None:
        if self.sink is None:
            return
        try:
            await self.sink.dismiss_notification(notification)
        except Exception:
            logger.exception("Failed to dismiss notification")
