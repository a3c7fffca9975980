"""User-level actions sequenced against the control endpoint.

Each public coroutine returns ``True`` when the action was fully applied.
Failures never raise: they end as exactly one notification and leave the
store as it was before the call.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional, Sequence
from urllib.parse import urlparse

from models import MonitoredUrl, Severity, UrlStatus
from panel.errors import ControlPanelError, ValidationError
from panel.notifications import NotificationQueue
from panel.payloads import parse_accessible, parse_exported_config
from panel.store import ViewModelStore, describe_failure
from panel.transport import ControlClient
from panel.view import Confirmer

logger = logging.getLogger(__name__)

MIN_URL_INTERVAL_SECONDS = 5
MIN_TIMEOUT_SECONDS = 1
EXPORT_FILENAME = "page-reloader-config.txt"


def validate_url(value: Optional[str]) -> str:
    url = (value or "").strip()
    if not url:
        raise ValidationError("Please enter a URL")
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValidationError(f"Invalid URL: {url}")
    return url


def parse_interval(value: Any, minimum: int = MIN_URL_INTERVAL_SECONDS, label: str = "interval") -> int:
    """Parse a whole number of seconds no smaller than ``minimum``."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {label}. Must be {minimum} seconds or more.")
    try:
        seconds = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid {label}. Must be {minimum} seconds or more.") from exc
    if seconds < minimum:
        raise ValidationError(f"Invalid {label}. Must be {minimum} seconds or more.")
    return seconds


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class _Orchestrator:
    def __init__(
        self,
        client: ControlClient,
        store: ViewModelStore,
        notifications: NotificationQueue,
        confirmer: Optional[Confirmer] = None,
    ) -> None:
        self._client = client
        self._store = store
        self._notifications = notifications
        self._confirmer = confirmer

    async def _send(self, action: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self._client.request(action, params)

    async def _fail(self, prefix: str, exc: ControlPanelError, manual: str | None = None) -> bool:
        logger.warning("%s: %s", prefix, exc)
        message = describe_failure(prefix, exc)
        if manual:
            message = f"{message}\nManual command: {manual}"
        await self._notifications.push(message, Severity.DANGER)
        return False

    async def _reject(self, exc: ValidationError) -> bool:
        await self._notifications.push(str(exc), Severity.WARNING)
        return False

    async def _confirmed(self, prompts: Sequence[str]) -> bool:
        """Ask every prompt in turn; any refusal aborts."""
        if self._confirmer is None:
            logger.warning("No confirmer configured; refusing destructive action")
            return False
        for prompt in prompts:
            if not await self._confirmer.confirm(prompt):
                logger.info("Action cancelled at prompt: %s", prompt)
                return False
        return True

    async def _simple(
        self,
        action: str,
        success: str,
        failure: str,
        manual: str | None = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        try:
            await self._send(action, params)
        except ControlPanelError as exc:
            return await self._fail(failure, exc, manual)
        await self._notifications.push(success, Severity.SUCCESS)
        return True


class UrlActions(_Orchestrator):
    async def add(self, url: Optional[str], interval: Any = None) -> bool:
        """Register a URL, then apply its custom interval if one was given.

        A failed interval update does not undo the add; the URL stays
        registered with the default interval.
        """
        try:
            url = validate_url(url)
            custom = None if _is_blank(interval) else parse_interval(interval)
        except ValidationError as exc:
            return await self._reject(exc)

        if self._store.find_url(url) is not None:
            await self._notifications.push(f"{url} is already monitored", Severity.WARNING)
            return False

        try:
            await self._send("add-url", {"url": url})
        except ControlPanelError as exc:
            return await self._fail("Failed to add URL", exc, f'page-reloader add-url "{url}"')

        default = self._store.default_interval()
        entry = MonitoredUrl(url, UrlStatus.UNKNOWN, default, default)
        self._store.upsert_url(entry)

        if custom is None:
            await self._notifications.push("URL added with default interval", Severity.SUCCESS)
            await self._store.refresh_dashboard()
            return True

        try:
            await self._send("set-url-interval", {"url": url, "interval": custom})
        except ControlPanelError as exc:
            logger.warning("URL %s added but interval update failed: %s", url, exc)
            await self._notifications.push(
                describe_failure(f"URL added, but setting its {custom}s interval failed", exc),
                Severity.WARNING,
            )
            return False

        self._store.upsert_url(replace(entry, interval=custom))
        await self._notifications.push(f"URL added with {custom}s interval", Severity.SUCCESS)
        await self._store.refresh_dashboard()
        return True

    async def remove(self, url: str) -> bool:
        if not await self._confirmed([f"Remove URL: {url}?"]):
            return False
        try:
            await self._send("remove-url", {"url": url})
        except ControlPanelError as exc:
            return await self._fail("Failed to remove URL", exc, f'page-reloader remove-url "{url}"')
        self._store.delete_url(url)
        await self._notifications.push("URL removed", Severity.SUCCESS)
        await self._store.refresh_dashboard()
        return True

    async def set_interval(self, url: str, interval: Any) -> bool:
        try:
            seconds = parse_interval(interval)
        except ValidationError as exc:
            return await self._reject(exc)
        try:
            await self._send("set-url-interval", {"url": url, "interval": seconds})
        except ControlPanelError as exc:
            return await self._fail(
                "Failed to update interval", exc, f'page-reloader set-url-interval "{url}" {seconds}'
            )
        entry = self._store.find_url(url)
        if entry is not None:
            self._store.upsert_url(replace(entry, interval=seconds))
        await self._notifications.push(f"Interval updated to {seconds}s for {url}", Severity.SUCCESS)
        await self._store.refresh_urls()
        return True

    async def test(self, url: str) -> bool:
        try:
            data = await self._send("test-url", {"url": url})
        except ControlPanelError as exc:
            return await self._fail(f"Failed to test {url}", exc)
        if parse_accessible(data):
            await self._notifications.push(f"{url} is accessible", Severity.SUCCESS)
        else:
            await self._notifications.push(f"{url} is not accessible", Severity.WARNING)
        return True

    async def test_all(self) -> bool:
        ok = await self._simple(
            "test-all",
            "All URLs tested. Check logs for details.",
            "Failed to test URLs",
            "page-reloader test-all",
        )
        if ok:
            await asyncio.gather(self._store.refresh_urls(), self._store.refresh_logs())
        return ok

    async def clear_all(self) -> bool:
        prompts = [
            "Are you sure you want to remove ALL URLs? This cannot be undone!",
            "Really remove every monitored URL?",
        ]
        if not await self._confirmed(prompts):
            return False
        try:
            await self._send("clear-urls")
        except ControlPanelError as exc:
            return await self._fail("Failed to clear URLs", exc, "page-reloader clear-urls")
        self._store.clear_urls()
        await self._notifications.push("All URLs cleared", Severity.SUCCESS)
        await self._store.refresh_dashboard()
        return True


class ServiceActions(_Orchestrator):
    def __init__(self, *args: Any, on_uninstalled: Optional[Callable[[], None]] = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._on_uninstalled = on_uninstalled

    async def _control(self, action: str, done: str) -> bool:
        ok = await self._simple(
            action,
            f"Service {done}",
            f"Failed to {action} service",
            f"page-reloader {action}",
        )
        if ok:
            await self._store.refresh_dashboard()
        return ok

    async def start(self) -> bool:
        return await self._control("start", "started")

    async def stop(self) -> bool:
        return await self._control("stop", "stopped")

    async def restart(self) -> bool:
        return await self._control("restart", "restarted")

    async def enable_autostart(self) -> bool:
        return await self._simple(
            "enable-autostart", "Auto-start enabled", "Failed to enable auto-start",
            "page-reloader enable-autostart",
        )

    async def disable_autostart(self) -> bool:
        return await self._simple(
            "disable-autostart", "Auto-start disabled", "Failed to disable auto-start",
            "page-reloader disable-autostart",
        )

    async def uninstall(self) -> bool:
        prompts = [
            "Are you sure you want to uninstall the Page Reloader service? "
            "This will remove all configuration!",
            "This action cannot be undone! Are you absolutely sure?",
        ]
        if not await self._confirmed(prompts):
            return False
        ok = await self._simple(
            "uninstall", "Service uninstalled successfully", "Failed to uninstall",
            "page-reloader uninstall",
        )
        if ok and self._on_uninstalled is not None:
            self._on_uninstalled()
        return ok


class TimingActions(_Orchestrator):
    def __init__(self, *args: Any, presets: Sequence[str] = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.presets = tuple(presets)

    async def set_default_interval(self, value: Any) -> bool:
        try:
            seconds = parse_interval(value, MIN_URL_INTERVAL_SECONDS)
        except ValidationError as exc:
            return await self._reject(exc)
        ok = await self._simple(
            "set-interval", "Default interval updated", "Failed to update interval",
            f"page-reloader set-interval {seconds}", {"interval": seconds},
        )
        if ok:
            await self._store.refresh_timing()
        return ok

    async def set_timeout(self, value: Any) -> bool:
        try:
            seconds = parse_interval(value, MIN_TIMEOUT_SECONDS, label="timeout")
        except ValidationError as exc:
            return await self._reject(exc)
        ok = await self._simple(
            "set-timeout", "Timeout updated", "Failed to update timeout",
            f"page-reloader set-timeout {seconds}", {"timeout": seconds},
        )
        if ok:
            await self._store.refresh_timing()
        return ok

    async def apply_preset(self, preset: str) -> bool:
        preset = (preset or "").strip()
        if preset not in self.presets:
            return await self._reject(ValidationError(f"Unknown timing preset: {preset or '(empty)'}"))
        ok = await self._simple(
            "set-preset", f"Applied {preset} preset", "Failed to apply preset",
            f"page-reloader set-preset {preset}", {"preset": preset},
        )
        if ok:
            await self._store.refresh_timing()
        return ok


class ConfigActions(_Orchestrator):
    def __init__(self, *args: Any, download: Optional[Callable[[str, str], Any]] = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._download = download

    async def export(self) -> bool:
        try:
            data = await self._send("export-config")
        except ControlPanelError as exc:
            return await self._fail("Failed to export config", exc, "page-reloader export-config")
        if self._download is not None:
            await self._download(EXPORT_FILENAME, parse_exported_config(data))
        await self._notifications.push("Configuration exported", Severity.SUCCESS)
        return True

    async def import_config(self, content: str | bytes) -> bool:
        """Submit a configuration file's text verbatim, then reload affected views."""
        try:
            if isinstance(content, bytes):
                try:
                    content = content.decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise ValidationError("Configuration file is not valid UTF-8 text") from exc
            if not content.strip():
                raise ValidationError("Configuration file is empty")
        except ValidationError as exc:
            return await self._reject(exc)

        ok = await self._simple(
            "import-config", "Configuration imported successfully", "Failed to import config",
            params={"config": content},
        )
        if ok:
            await asyncio.gather(
                self._store.refresh_urls(),
                self._store.refresh_timing(),
                self._store.refresh_status(),
            )
        return ok
