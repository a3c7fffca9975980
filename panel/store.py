"""Single source of truth for what the panel renders."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, Optional

from models import MonitoredUrl, ServiceStatus, Severity, TimingConfig
from panel.errors import ControlPanelError, EndpointUnreachableError
from panel.notifications import NotificationQueue
from panel.payloads import (
    parse_logs,
    parse_service_status,
    parse_system_info,
    parse_timing,
    parse_url_list,
    unique_urls,
)
from panel.transport import ControlClient

logger = logging.getLogger(__name__)

MANUAL_HINT = "Use the Manual Commands tab for SSH commands."


@dataclass(slots=True, frozen=True)
class PanelState:
    """Immutable snapshot. ``None`` marks an entity that was never loaded."""

    service: Optional[ServiceStatus] = None
    urls: Optional[tuple[MonitoredUrl, ...]] = None
    timing: Optional[TimingConfig] = None
    logs: Optional[tuple[str, ...]] = None
    system_info: Optional[str] = None


Listener = Callable[[PanelState], None]


def describe_failure(prefix: str, exc: ControlPanelError) -> str:
    message = f"{prefix}: {exc}"
    if isinstance(exc, EndpointUnreachableError):
        message = f"{message}. {MANUAL_HINT}"
    return message


class ViewModelStore:
    """Holds the last-known service state and refreshes it from the endpoint.

    Every mutation swaps in a new :class:`PanelState`, so a reader never sees
    a half-updated entity. Failed refreshes keep the previous entity.
    """

    def __init__(
        self,
        client: ControlClient,
        notifications: NotificationQueue,
        *,
        default_url_interval: int = 30,
        default_timeout: int = 10,
    ) -> None:
        self._client = client
        self._notifications = notifications
        self._fallback_timing = TimingConfig(default_url_interval, default_timeout)
        self._state = PanelState()
        self._listeners: list[Listener] = []

    def snapshot(self) -> PanelState:
        return self._state

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _publish(self, state: PanelState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    # getters

    @property
    def service_status(self) -> Optional[ServiceStatus]:
        return self._state.service

    @property
    def urls(self) -> tuple[MonitoredUrl, ...]:
        return self._state.urls or ()

    @property
    def timing(self) -> Optional[TimingConfig]:
        return self._state.timing

    @property
    def logs(self) -> tuple[str, ...]:
        return self._state.logs or ()

    @property
    def system_info(self) -> Optional[str]:
        return self._state.system_info

    def find_url(self, url: str) -> Optional[MonitoredUrl]:
        for entry in self.urls:
            if entry.url == url:
                return entry
        return None

    def default_interval(self) -> int:
        return (self._state.timing or self._fallback_timing).default_interval_seconds

    # setters

    def set_service_status(self, status: ServiceStatus) -> None:
        self._publish(replace(self._state, service=status))

    def replace_urls(self, urls: Iterable[MonitoredUrl]) -> None:
        self._publish(replace(self._state, urls=unique_urls(urls)))

    def upsert_url(self, entry: MonitoredUrl) -> None:
        current = list(self.urls)
        for index, existing in enumerate(current):
            if existing.url == entry.url:
                current[index] = entry
                break
        else:
            current.append(entry)
        self._publish(replace(self._state, urls=tuple(current)))

    def delete_url(self, url: str) -> None:
        remaining = tuple(entry for entry in self.urls if entry.url != url)
        self._publish(replace(self._state, urls=remaining))

    def clear_urls(self) -> None:
        self._publish(replace(self._state, urls=()))

    def set_timing(self, timing: TimingConfig) -> None:
        self._publish(replace(self._state, timing=timing))

    def set_logs(self, lines: Iterable[str]) -> None:
        self._publish(replace(self._state, logs=tuple(lines)))

    def clear_logs(self) -> None:
        """Empty the displayed log tail; the service keeps its log."""
        self._publish(replace(self._state, logs=()))

    def set_system_info(self, info: str) -> None:
        self._publish(replace(self._state, system_info=info))

    # refreshes
    # TODO: tag requests with a per-entity sequence number so a slow, superseded
    # response cannot overwrite a newer one.

    async def _fetch(self, action: str, failure: str, parse: Callable[[Any], Any]):
        """Request ``action`` and parse its data; a bad shape counts as a failure."""
        try:
            return True, parse(await self._client.request(action))
        except ControlPanelError as exc:
            logger.warning("Refresh via %s failed: %s", action, exc)
            await self._notifications.push(describe_failure(failure, exc), Severity.DANGER)
            return False, None

    async def refresh_status(self) -> bool:
        ok, status = await self._fetch("status", "Failed to load service status", parse_service_status)
        if ok:
            self.set_service_status(status)
        return ok

    async def refresh_urls(self) -> bool:
        default = self.default_interval()
        ok, urls = await self._fetch(
            "list-urls", "Failed to load URLs", lambda data: parse_url_list(data, default)
        )
        if ok:
            self.replace_urls(urls)
        return ok

    async def refresh_timing(self) -> bool:
        ok, data = await self._fetch("show-timing", "Failed to load timing information", lambda data: data)
        if ok:
            self.set_timing(parse_timing(data, self._state.timing, self._fallback_timing))
        return ok

    async def refresh_logs(self) -> bool:
        ok, lines = await self._fetch("logs", "Failed to load logs", parse_logs)
        if ok:
            self.set_logs(lines)
        return ok

    async def refresh_system_info(self) -> bool:
        ok, info = await self._fetch("system-info", "Failed to load system information", parse_system_info)
        if ok:
            self.set_system_info(info)
        return ok

    async def refresh_dashboard(self) -> bool:
        results = await asyncio.gather(self.refresh_status(), self.refresh_urls())
        return all(results)

    async def refresh_all(self) -> bool:
        results = await asyncio.gather(
            self.refresh_status(),
            self.refresh_urls(),
            self.refresh_timing(),
            self.refresh_logs(),
            self.refresh_system_info(),
        )
        return all(results)
