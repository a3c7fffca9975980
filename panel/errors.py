"""Error taxonomy for control endpoint interaction."""
from __future__ import annotations


class ControlPanelError(Exception):
    """Base class for failures surfaced to the user as a notification."""


class ValidationError(ControlPanelError):
    """Local input was rejected before any request was made."""


class TransportError(ControlPanelError):
    """The control endpoint could not be reached or answered with an error status."""

    def __init__(self, action: str, message: str) -> None:
        super().__init__(message)
        self.action = action


class HttpStatusError(TransportError):
    def __init__(self, action: str, status: int) -> None:
        super().__init__(action, f"HTTP error {status}")
        self.status = status


class EndpointUnreachableError(TransportError):
    def __init__(self, action: str, reason: str = "") -> None:
        message = "Control endpoint unreachable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(action, message)


class ProtocolError(ControlPanelError):
    """The endpoint answered with an envelope whose ``success`` flag is false."""

    def __init__(self, action: str, error: str | None = None) -> None:
        super().__init__(error or f"{action} was rejected by the service")
        self.action = action
        self.error = error


__all__ = [
    "ControlPanelError",
    "EndpointUnreachableError",
    "HttpStatusError",
    "ProtocolError",
    "TransportError",
    "ValidationError",
]
