"""User-facing transient messages."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(slots=True, frozen=True)
class Notification:
    message: str
    severity: Severity = Severity.INFO
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
