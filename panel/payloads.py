"""Interpretation of endpoint payloads that may be structured or plain text."""
from __future__ import annotations

from typing import Any, Iterable

from models import MonitoredUrl, ServiceStatus, TimingConfig, UrlStatus
from panel.errors import ProtocolError


def _text(data: Any) -> str:
    return data if isinstance(data, str) else ""


def parse_service_status(data: Any) -> ServiceStatus:
    if isinstance(data, dict):
        return ServiceStatus(running=data.get("running") is True)
    text = _text(data).lower()
    running = "running" in text and "not running" not in text and "stopped" not in text
    return ServiceStatus(running=running)


def unique_urls(entries: Iterable[MonitoredUrl]) -> tuple[MonitoredUrl, ...]:
    """Collapse entries sharing a URL, keeping the last one in first-seen position."""
    by_url: dict[str, MonitoredUrl] = {}
    for entry in entries:
        by_url[entry.url] = entry
    return tuple(by_url.values())


def _url_entries(raw: Any, default_interval: int) -> list[MonitoredUrl]:
    entries: list[MonitoredUrl] = []
    for item in raw:
        if isinstance(item, dict):
            if str(item.get("url", "")).strip():
                entries.append(MonitoredUrl.from_payload(item, default_interval))
        elif isinstance(item, str) and item.strip():
            entries.append(MonitoredUrl(item.strip(), UrlStatus.UNKNOWN, default_interval, default_interval))
    return entries


def _url_lines(text: str, default_interval: int) -> list[MonitoredUrl]:
    entries: list[MonitoredUrl] = []
    for line in text.splitlines():
        line = line.strip()
        if line and "http" in line:
            entries.append(MonitoredUrl(line, UrlStatus.UNKNOWN, default_interval, default_interval))
    return entries


def parse_url_list(data: Any, default_interval: int) -> tuple[MonitoredUrl, ...]:
    """Accept ``{"urls": [...]}``, a bare list, or text with one URL per line.

    Any other shape raises :class:`ProtocolError` so the previous list is kept.
    """
    if isinstance(data, dict):
        data = data.get("urls")
    if data is None:
        return ()
    if isinstance(data, (list, tuple)):
        return unique_urls(_url_entries(data, default_interval))
    if isinstance(data, str):
        return unique_urls(_url_lines(data, default_interval))
    raise ProtocolError("list-urls", f"Unexpected URL list of type {type(data).__name__}")


def _positive(value: Any, fallback: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return fallback
    return number if number > 0 else fallback


def parse_timing(data: Any, previous: TimingConfig | None, fallback: TimingConfig) -> TimingConfig:
    base = previous or fallback
    if isinstance(data, dict):
        return TimingConfig(
            default_interval_seconds=_positive(data.get("interval"), base.default_interval_seconds),
            timeout_seconds=_positive(data.get("timeout"), base.timeout_seconds),
            info_text=str(data.get("info") or ""),
        )
    return TimingConfig(
        default_interval_seconds=base.default_interval_seconds,
        timeout_seconds=base.timeout_seconds,
        info_text=_text(data),
    )


def parse_logs(data: Any) -> tuple[str, ...]:
    if isinstance(data, dict):
        data = data.get("logs")
    if data is None:
        return ()
    if isinstance(data, str):
        return tuple(data.splitlines())
    if isinstance(data, (list, tuple)):
        return tuple(str(line) for line in data)
    raise ProtocolError("logs", f"Unexpected log payload of type {type(data).__name__}")


def parse_system_info(data: Any) -> str:
    if isinstance(data, dict):
        return str(data.get("info") or "")
    return _text(data)


def parse_accessible(data: Any) -> bool:
    return isinstance(data, dict) and data.get("accessible") is True


def parse_exported_config(data: Any) -> str:
    if isinstance(data, dict):
        return str(data.get("config") or "")
    return _text(data)
