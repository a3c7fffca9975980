"""Application context owning every panel component for the page's lifetime."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from config import Settings
from models import ActiveTab
from panel.actions import ConfigActions, ServiceActions, TimingActions, UrlActions
from panel.notifications import NotificationQueue
from panel.scheduler import AutoRefreshScheduler
from panel.store import PanelState, ViewModelStore
from panel.tabs import TabController
from panel.transport import ControlClient
from panel.view import PanelView

logger = logging.getLogger(__name__)


class AppContext:
    """Built once at startup and closed on shutdown.

    Store and tab changes re-render the active tab through ``view``; renders
    requested while one is in flight are folded into a single follow-up.
    """

    def __init__(
        self,
        client: ControlClient,
        view: PanelView,
        *,
        initial_tab: ActiveTab | str = ActiveTab.DASHBOARD,
        auto_refresh_seconds: float = 30.0,
        notification_ttl: float = 5.0,
        default_url_interval: int = 30,
        default_timeout: int = 10,
        timing_presets: tuple[str, ...] = (),
    ) -> None:
        self.client = client
        self.view = view
        self.notifications = NotificationQueue(view, ttl_seconds=notification_ttl)
        self.store = ViewModelStore(
            client,
            self.notifications,
            default_url_interval=default_url_interval,
            default_timeout=default_timeout,
        )
        self.tabs = TabController(self.store, initial_tab)
        self.scheduler = AutoRefreshScheduler(self.auto_refresh, auto_refresh_seconds)

        parts = (client, self.store, self.notifications, view)
        self.urls = UrlActions(*parts)
        self.service = ServiceActions(*parts, on_uninstalled=self.scheduler.teardown)
        self.timing = TimingActions(*parts, presets=timing_presets)
        self.config = ConfigActions(*parts, download=view.offer_download)

        self._render_task: Optional[asyncio.Task[None]] = None
        self._render_again = False
        self._closed = False
        self.store.subscribe(self._on_state_change)
        self.tabs.subscribe(self._on_tab_change)

    @classmethod
    def from_settings(cls, settings: Settings, view: PanelView) -> "AppContext":
        client = ControlClient(settings.API_URL, timeout=settings.REQUEST_TIMEOUT)
        return cls(
            client,
            view,
            initial_tab=settings.DEFAULT_TAB,
            auto_refresh_seconds=settings.AUTO_REFRESH_SECONDS,
            notification_ttl=settings.NOTIFICATION_TTL_SECONDS,
            default_url_interval=settings.DEFAULT_URL_INTERVAL_SECONDS,
            default_timeout=settings.DEFAULT_TIMEOUT_SECONDS,
            timing_presets=settings.TIMING_PRESETS,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        """Initial load of every view, then start the auto-refresh timer."""
        self.scheduler.start()
        await self.store.refresh_all()
        self.request_render()

    async def auto_refresh(self) -> None:
        if not self.tabs.is_active(ActiveTab.DASHBOARD):
            logger.debug("Auto-refresh skipped; %s tab is active", self.tabs.active.value)
            return
        await self.store.refresh_dashboard()

    def hide(self) -> None:
        self.scheduler.pause()

    def show(self) -> None:
        if not self._closed:
            self.scheduler.resume()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.scheduler.teardown()
        await self.notifications.clear()
        if self._render_task is not None and not self._render_task.done():
            self._render_task.cancel()
        await self.client.close()
        logger.info("Panel context closed")

    def _on_state_change(self, state: PanelState) -> None:
        self.request_render()

    def _on_tab_change(self, tab: ActiveTab) -> None:
        self.request_render()

    def request_render(self) -> None:
        if self._closed:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        if self._render_task is not None and not self._render_task.done():
            self._render_again = True
            return
        self._render_task = loop.create_task(self._render())

    async def _render(self) -> None:
        while True:
            self._render_again = False
            tab = self.tabs.active
            try:
                await self.view.render(tab, self.store.snapshot())
            except Exception:
                logger.exception("Failed to render %s tab", tab.value)
            if not self._render_again:
                break

    async def wait_rendered(self) -> None:
        """Wait until no render is pending."""
        while self._render_task is not None and not self._render_task.done():
            await asyncio.shield(self._render_task)
