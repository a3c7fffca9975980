"""Service-level state mirrored from the control endpoint."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(slots=True, frozen=True)
class ServiceStatus:
    """Result of the last successful ``status`` poll."""

    running: bool
    checked_at: datetime = field(default_factory=lambda: datetime.now(UTC), compare=False)


@dataclass(slots=True, frozen=True)
class TimingConfig:
    default_interval_seconds: int
    timeout_seconds: int
    info_text: str = ""

    def __post_init__(self) -> None:
        if self.default_interval_seconds <= 0 or self.timeout_seconds <= 0:
            raise ValueError("timing values must be positive")
