"""Pytest configuration and fixtures."""
from __future__ import annotations

from typing import Any

import pytest

from config import settings
from models import ActiveTab, Notification
from panel.errors import EndpointUnreachableError, HttpStatusError
from panel.notifications import NotificationQueue
from panel.store import PanelState, ViewModelStore
from panel.transport import CallResult, ControlClient, Failure, StructuredOk, TextOk

ENDPOINT = "http://router.test/cgi-bin/page-reloader-api"


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch) -> None:
    """Set up test environment variables"""
    monkeypatch.setenv('BOT_TOKEN', 'test_token_123456')
    monkeypatch.setenv('ADMIN_CHAT_IDS', '123456789,987654321')
    monkeypatch.setenv('API_URL', ENDPOINT)
    monkeypatch.setenv('AUTO_REFRESH_SECONDS', '30')
    monkeypatch.setenv('NOTIFICATION_TTL_SECONDS', '5')
    settings.reload()


def ok(action: str, data: Any = None) -> StructuredOk:
    return StructuredOk(action, {"success": True, "data": data})


def rejected(action: str, error: str) -> StructuredOk:
    return StructuredOk(action, {"success": False, "error": error})


def text(action: str, body: str) -> TextOk:
    return TextOk(action, body)


def http_error(action: str, status: int = 500) -> Failure:
    return Failure(action, HttpStatusError(action, status))


def unreachable(action: str) -> Failure:
    return Failure(action, EndpointUnreachableError(action, "connection refused"))


class ScriptedClient(ControlClient):
    """Client answering from per-action scripts; the last scripted result repeats."""

    def __init__(self) -> None:
        super().__init__(ENDPOINT)
        self.scripts: dict[str, list[CallResult]] = {}
        self.calls: list[tuple[str, dict[str, str]]] = []

    def script(self, *results: CallResult) -> "ScriptedClient":
        for result in results:
            self.scripts.setdefault(result.action, []).append(result)
        return self

    async def call(self, action, params=None, method=None) -> CallResult:
        self.calls.append((action, {key: str(value) for key, value in (params or {}).items()}))
        queue = self.scripts.get(action)
        if not queue:
            return unreachable(action)
        return queue.pop(0) if len(queue) > 1 else queue[0]

    @property
    def actions(self) -> list[str]:
        return [action for action, _ in self.calls]

    async def close(self) -> None:
        return None


class RecordingView:
    """In-memory render target."""

    def __init__(self, answers: list[bool] | None = None) -> None:
        self.answers = list(answers or [])
        self.prompts: list[str] = []
        self.renders: list[tuple[ActiveTab, PanelState]] = []
        self.shown: list[Notification] = []
        self.dismissed: list[Notification] = []
        self.downloads: list[tuple[str, str]] = []

    async def render(self, tab, state) -> None:
        self.renders.append((tab, state))

    async def show_notification(self, notification) -> None:
        self.shown.append(notification)

    async def dismiss_notification(self, notification) -> None:
        self.dismissed.append(notification)

    async def confirm(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.answers.pop(0) if self.answers else False

    async def offer_download(self, filename: str, content: str) -> None:
        self.downloads.append((filename, content))


@pytest.fixture
def client() -> ScriptedClient:
    return ScriptedClient()


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def notifications(view) -> NotificationQueue:
    # long ttl so nothing expires mid-test
    return NotificationQueue(view, ttl_seconds=60)


@pytest.fixture
def store(client, notifications) -> ViewModelStore:
    return ViewModelStore(client, notifications, default_url_interval=30, default_timeout=10)
