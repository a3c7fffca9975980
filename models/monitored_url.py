"""Data model for URLs watched by the reload service."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class UrlStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "UrlStatus":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


def _positive_int(value: Any, fallback: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return fallback
    return number if number > 0 else fallback


@dataclass(slots=True, frozen=True)
class MonitoredUrl:
    """A URL registered with the service, keyed by ``url``."""

    url: str
    status: UrlStatus = UrlStatus.UNKNOWN
    interval: int = 30
    default_interval: int = 30

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("url must not be empty")
        if self.interval <= 0 or self.default_interval <= 0:
            raise ValueError("intervals must be positive")

    @property
    def is_custom_interval(self) -> bool:
        return self.interval != self.default_interval

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], default_interval: int) -> "MonitoredUrl":
        """Build an entry from one element of the ``list-urls`` payload."""
        url = str(payload.get("url", "")).strip()
        base = _positive_int(payload.get("defaultInterval"), default_interval)
        return cls(
            url=url,
            status=UrlStatus.parse(payload.get("status", "unknown")),
            interval=_positive_int(payload.get("interval"), base),
            default_interval=base,
        )
