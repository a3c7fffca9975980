"""Tracks the one active panel view and refreshes it on entry."""
from __future__ import annotations

import logging
from typing import Callable

from models import ActiveTab
from panel.store import ViewModelStore

logger = logging.getLogger(__name__)

TabListener = Callable[[ActiveTab], None]


class TabController:
    def __init__(self, store: ViewModelStore, initial: ActiveTab | str = ActiveTab.DASHBOARD) -> None:
        self._store = store
        self._active = ActiveTab.coerce(initial)
        self._listeners: list[TabListener] = []
        self._entry_refresh = {
            ActiveTab.DASHBOARD: store.refresh_dashboard,
            ActiveTab.URLS: store.refresh_urls,
            ActiveTab.TIMING: store.refresh_timing,
            ActiveTab.LOGS: store.refresh_logs,
        }

    @property
    def active(self) -> ActiveTab:
        return self._active

    def is_active(self, tab: ActiveTab | str) -> bool:
        return self._active is ActiveTab.coerce(tab)

    def subscribe(self, listener: TabListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    async def select(self, tab: ActiveTab | str) -> ActiveTab:
        """Activate ``tab`` immediately, then run its entry refresh (if any)."""
        tab = ActiveTab.coerce(tab)
        self._active = tab
        logger.debug("Switched to %s tab", tab.value)
        for listener in list(self._listeners):
            listener(tab)

        refresh = self._entry_refresh.get(tab)
        if refresh is not None:
            await refresh()
        return tab
