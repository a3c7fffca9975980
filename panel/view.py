"""Interfaces implemented by whatever renders the panel."""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from models import ActiveTab, Notification

if TYPE_CHECKING:
    from panel.store import PanelState


class NotificationSink(Protocol):
    async def show_notification(self, notification: Notification) -> None: ...

    async def dismiss_notification(self, notification: Notification) -> None: ...


class Confirmer(Protocol):
    async def confirm(self, prompt: str) -> bool: ...


class PanelView(NotificationSink, Confirmer, Protocol):
    async def render(self, tab: ActiveTab, state: "PanelState") -> None: ...

    async def offer_download(self, filename: str, content: str) -> None: ...
