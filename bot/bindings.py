"""Per-render callback bindings for inline buttons.

Telegram limits ``callback_data`` to 64 bytes, which a URL easily exceeds, so
item buttons carry a short token and the item itself lives in the closure.
"""
from __future__ import annotations

import itertools
from typing import Any, Awaitable, Callable, Optional

Callback = Callable[[], Awaitable[Any]]

PREFIX = "bind"


class CallbackBindings:
    def __init__(self) -> None:
        self._callbacks: dict[str, Callback] = {}
        self._counter = itertools.count(1)

    def __len__(self) -> int:
        return len(self._callbacks)

    def bind(self, callback: Callback) -> str:
        """Register ``callback`` and return the ``callback_data`` for its button."""
        token = f"{next(self._counter):x}"
        self._callbacks[token] = callback
        return f"{PREFIX}:{token}"

    def resolve(self, data: str) -> Optional[Callback]:
        prefix, _, token = (data or "").partition(":")
        if prefix != PREFIX:
            return None
        return self._callbacks.get(token)

    def reset(self) -> None:
        self._callbacks.clear()
