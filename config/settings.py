"""Configuration helpers for environment-driven settings."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

if os.getenv("PYTEST_CURRENT_TEST") is None:
    load_dotenv()


def _split_csv(value: str) -> Tuple[str, ...]:
    return tuple(entry.strip() for entry in value.split(",") if entry.strip())


def _read_int(name: str, default: str, minimum: int) -> int:
    try:
        value = int(os.getenv(name, default))
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}")
    return value


def _read_float(name: str, default: str) -> float:
    try:
        value = float(os.getenv(name, default))
    except ValueError as exc:
        raise ValueError(f"{name} must be a number") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


@dataclass(slots=True)
class Settings:
    """Runtime application settings sourced from environment variables."""

    BOT_TOKEN: str = field(init=False)
    ADMIN_CHAT_IDS: Tuple[int, ...] = field(init=False)
    API_URL: str = field(init=False)
    REQUEST_TIMEOUT: float = field(init=False)
    AUTO_REFRESH_SECONDS: float = field(init=False)
    NOTIFICATION_TTL_SECONDS: float = field(init=False)
    CONFIRM_TIMEOUT_SECONDS: float = field(init=False)
    DEFAULT_URL_INTERVAL_SECONDS: int = field(init=False)
    DEFAULT_TIMEOUT_SECONDS: int = field(init=False)
    TIMING_PRESETS: Tuple[str, ...] = field(init=False)
    DEFAULT_TAB: str = field(init=False)

    def __post_init__(self) -> None:
        self.reload()

    def reload(self) -> None:
        self.BOT_TOKEN = os.getenv("BOT_TOKEN", "").strip()
        try:
            self.ADMIN_CHAT_IDS = tuple(
                int(chat_id)
                for chat_id in _split_csv(os.getenv("ADMIN_CHAT_IDS", ""))
            )
        except ValueError as exc:
            raise ValueError("ADMIN_CHAT_IDS must be a comma separated list of integers") from exc

        api_url = os.getenv("API_URL", "http://192.168.1.1/cgi-bin/page-reloader-api").strip()
        if not api_url.startswith(("http://", "https://")):
            raise ValueError("API_URL must be an http(s) URL")
        self.API_URL = api_url

        self.REQUEST_TIMEOUT = _read_float("REQUEST_TIMEOUT", "10")
        self.AUTO_REFRESH_SECONDS = _read_float("AUTO_REFRESH_SECONDS", "30")
        self.NOTIFICATION_TTL_SECONDS = _read_float("NOTIFICATION_TTL_SECONDS", "5")
        self.CONFIRM_TIMEOUT_SECONDS = _read_float("CONFIRM_TIMEOUT_SECONDS", "60")
        self.DEFAULT_URL_INTERVAL_SECONDS = _read_int("DEFAULT_URL_INTERVAL_SECONDS", "30", 5)
        self.DEFAULT_TIMEOUT_SECONDS = _read_int("DEFAULT_TIMEOUT_SECONDS", "10", 1)

        presets = _split_csv(os.getenv("TIMING_PRESETS", "fast,normal,slow"))
        if not presets:
            raise ValueError("TIMING_PRESETS must contain at least one preset")
        self.TIMING_PRESETS = presets

        self.DEFAULT_TAB = os.getenv("DEFAULT_TAB", "dashboard").strip().lower() or "dashboard"

    def validate(self) -> None:
        if not self.BOT_TOKEN:
            raise ValueError("BOT_TOKEN is required in .env file")
        if not self.ADMIN_CHAT_IDS:
            raise ValueError("ADMIN_CHAT_IDS is required in .env file")

settings = Settings()
