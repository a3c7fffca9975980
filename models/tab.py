"""Closed set of panel views."""
from __future__ import annotations

from enum import Enum


class ActiveTab(str, Enum):
    DASHBOARD = "dashboard"
    URLS = "urls"
    TIMING = "timing"
    LOGS = "logs"
    SETTINGS = "settings"
    MANUAL = "manual"

    @classmethod
    def coerce(cls, value: "ActiveTab | str") -> "ActiveTab":
        """Accept an enum member or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown tab: {value!r}") from exc
