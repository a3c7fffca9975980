"""HTTP client for the page-reloader control endpoint."""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import aiohttp

from panel.errors import (
    ControlPanelError,
    EndpointUnreachableError,
    HttpStatusError,
    ProtocolError,
)

logger = logging.getLogger(__name__)

GET = "GET"
POST = "POST"

ACTION_METHODS: dict[str, str] = {
    "status": GET,
    "list-urls": GET,
    "show-timing": GET,
    "logs": GET,
    "system-info": GET,
    "export-config": GET,
    "add-url": POST,
    "remove-url": POST,
    "set-url-interval": POST,
    "test-url": POST,
    "test-all": POST,
    "start": POST,
    "stop": POST,
    "restart": POST,
    "set-interval": POST,
    "set-timeout": POST,
    "set-preset": POST,
    "enable-autostart": POST,
    "disable-autostart": POST,
    "import-config": POST,
    "clear-urls": POST,
    "uninstall": POST,
}


@dataclass(slots=True, frozen=True)
class StructuredOk:
    """Body parsed as JSON; usually the ``{success, data, error}`` envelope."""

    action: str
    payload: Any

    def unwrap(self) -> Any:
        payload = self.payload
        if isinstance(payload, dict) and "success" in payload:
            if not payload.get("success"):
                error = payload.get("error")
                raise ProtocolError(self.action, str(error) if error else None)
            if "data" in payload:
                return payload["data"]
            return payload.get("message")
        return payload


@dataclass(slots=True, frozen=True)
class TextOk:
    """Body that is not JSON. Some actions reply with plain text."""

    action: str
    text: str

    def unwrap(self) -> str:
        return self.text


@dataclass(slots=True, frozen=True)
class Failure:
    action: str
    error: ControlPanelError

    def unwrap(self) -> Any:
        raise self.error


CallResult = Union[StructuredOk, TextOk, Failure]


class ControlClient:
    """Issues ``action`` requests against the single control endpoint."""

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"Accept": "application/json"},
            )
            self._owns_session = True
        return self.session

    async def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session and self.session is not None:
            await self.session.close()
            self.session = None

    async def call(
        self,
        action: str,
        params: Optional[Mapping[str, Any]] = None,
        method: Optional[str] = None,
    ) -> CallResult:
        """Send one action and classify the reply. Never raises for I/O problems."""
        method = (method or ACTION_METHODS.get(action, POST)).upper()
        fields = {key: str(value) for key, value in (params or {}).items()}
        query = {"action": action}
        session = await self._get_session()

        logger.debug("Calling %s %s with %s", method, action, sorted(fields))
        try:
            if method == GET:
                query.update(fields)
                request = session.get(self.endpoint, params=query)
            else:
                request = session.post(self.endpoint, params=query, data=fields)
            async with request as response:
                body = await response.text(errors="replace")
                status = response.status
        except asyncio.TimeoutError:
            logger.warning("Timeout calling %s", action)
            return Failure(action, EndpointUnreachableError(action, "timeout"))
        except aiohttp.ClientError as exc:
            logger.warning("Connection error calling %s: %s", action, exc)
            logger.debug("Connection error details", exc_info=True)
            return Failure(action, EndpointUnreachableError(action, str(exc)))

        if not 200 <= status < 300:
            logger.warning("Action %s failed with HTTP %s", action, status)
            return Failure(action, HttpStatusError(action, status))

        try:
            payload = json.loads(body)
        except ValueError:
            logger.debug("Action %s replied with plain text", action)
            return TextOk(action, body)
        return StructuredOk(action, payload)

    async def request(
        self,
        action: str,
        params: Optional[Mapping[str, Any]] = None,
        method: Optional[str] = None,
    ) -> Any:
        """Like :meth:`call` but returns the payload data or raises."""
        result = await self.call(action, params, method)
        return result.unwrap()


__all__ = [
    "ACTION_METHODS",
    "CallResult",
    "ControlClient",
    "Failure",
    "GET",
    "POST",
    "StructuredOk",
    "TextOk",
]
