"""Telegram chat as the panel's render target."""
from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from html import escape
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import BufferedInputFile, ForceReply

from bot.bindings import CallbackBindings
from bot.views import compose_tab, confirmation_keyboard, format_notification
from models import ActiveTab, MonitoredUrl, Notification
from panel.store import PanelState

if TYPE_CHECKING:
    from panel.context import AppContext

logger = logging.getLogger(__name__)

ReplyHandler = Callable[[Any], Awaitable[Any]]


@dataclass(slots=True)
class PendingPrompt:
    handler: ReplyHandler
    prompt_chat_id: int
    prompt_message_id: int
    accepts_document: bool = False


async def _delete_message_safe(bot: Bot, chat_id: int | None, message_id: int | None) -> None:
    if chat_id is None or message_id is None:
        return
    try:
        await bot.delete_message(chat_id, message_id)
    except Exception as exc:
        logger.debug("Could not delete message %s in %s: %r", message_id, chat_id, exc)


class TelegramPanel:
    """Keeps one panel message per chat up to date and hosts its dialogs."""

    def __init__(self, bot: Bot, confirm_timeout: float = 60.0) -> None:
        self.bot = bot
        self.confirm_timeout = confirm_timeout
        self.chat_id: Optional[int] = None
        self.message_id: Optional[int] = None
        self.bindings = CallbackBindings()
        self._context: Optional["AppContext"] = None
        self._notices: dict[Notification, int] = {}
        self._confirmations: dict[str, asyncio.Future[bool]] = {}
        self._prompts: dict[int, PendingPrompt] = {}
        self._tokens = itertools.count(1)

    def attach(self, context: "AppContext") -> None:
        self._context = context

    @property
    def is_open(self) -> bool:
        return self.chat_id is not None

    async def open_in(self, chat_id: int) -> None:
        """Move the panel to ``chat_id``; the next render posts a fresh message."""
        await self.close()
        self.chat_id = chat_id

    async def close(self) -> None:
        await _delete_message_safe(self.bot, self.chat_id, self.message_id)
        self.message_id = None
        self.chat_id = None
        self.bindings.reset()

    # rendering

    def _url_buttons(self, entry: MonitoredUrl) -> list[tuple[str, str]]:
        context = self._context
        if context is None:
            return []
        url = entry.url

        async def ask_interval() -> None:
            await self.prompt(
                f"Set check interval for {url} (seconds, currently {entry.interval}):",
                lambda text: context.urls.set_interval(url, text),
            )

        return [
            ("🧪 Test", self.bindings.bind(lambda: context.urls.test(url))),
            ("⏰ Timing", self.bindings.bind(ask_interval)),
            ("🗑 Remove", self.bindings.bind(lambda: context.urls.remove(url))),
        ]

    async def render(self, tab: ActiveTab, state: PanelState) -> None:
        if self.chat_id is None:
            return
        self.bindings.reset()
        presets = self._context.timing.presets if self._context is not None else ()
        text, keyboard = compose_tab(tab, state, url_buttons=self._url_buttons, presets=presets)

        if self.message_id is not None:
            try:
                await self.bot.edit_message_text(
                    chat_id=self.chat_id,
                    message_id=self.message_id,
                    text=text,
                    parse_mode="HTML",
                    reply_markup=keyboard,
                    disable_web_page_preview=True,
                )
                return
            except TelegramBadRequest as exc:
                message = str(exc).lower()
                if "message is not modified" in message:
                    return
                if "message to edit not found" not in message:
                    raise
                self.message_id = None

        sent = await self.bot.send_message(
            chat_id=self.chat_id,
            text=text,
            parse_mode="HTML",
            reply_markup=keyboard,
            disable_web_page_preview=True,
        )
        self.message_id = sent.message_id

    # notifications

    async def show_notification(self, notification: Notification) -> None:
        if self.chat_id is None:
            return
        sent = await self.bot.send_message(
            chat_id=self.chat_id,
            text=format_notification(notification),
            parse_mode="HTML",
            disable_web_page_preview=True,
        )
        self._notices[notification] = sent.message_id

    async def dismiss_notification(self, notification: Notification) -> None:
        message_id = self._notices.pop(notification, None)
        await _delete_message_safe(self.bot, self.chat_id, message_id)

    # dialogs

    async def confirm(self, prompt: str) -> bool:
        """Ask a Yes/No question; no answer within the timeout counts as No."""
        if self.chat_id is None:
            return False
        token = f"{next(self._tokens):x}"
        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()
        self._confirmations[token] = future
        sent = None
        try:
            sent = await self.bot.send_message(
                chat_id=self.chat_id,
                text=f"❓ {escape(prompt)}",
                parse_mode="HTML",
                reply_markup=confirmation_keyboard(token),
            )
            return await asyncio.wait_for(future, self.confirm_timeout)
        except asyncio.TimeoutError:
            logger.info("Confirmation %s timed out", token)
            return False
        finally:
            self._confirmations.pop(token, None)
            if sent is not None:
                await _delete_message_safe(self.bot, self.chat_id, sent.message_id)

    def resolve_confirmation(self, token: str, answer: bool) -> bool:
        future = self._confirmations.get(token)
        if future is None or future.done():
            return False
        future.set_result(answer)
        return True

    async def prompt(self, text: str, handler: ReplyHandler, *, accepts_document: bool = False) -> None:
        if self.chat_id is None:
            return
        sent = await self.bot.send_message(
            chat_id=self.chat_id,
            text=escape(text),
            parse_mode="HTML",
            reply_markup=ForceReply(selective=True),
        )
        self._prompts[sent.message_id] = PendingPrompt(
            handler=handler,
            prompt_chat_id=sent.chat.id,
            prompt_message_id=sent.message_id,
            accepts_document=accepts_document,
        )

    def take_prompt(self, message_id: int) -> Optional[PendingPrompt]:
        return self._prompts.pop(message_id, None)

    async def discard_prompt(self, prompt: PendingPrompt) -> None:
        await _delete_message_safe(self.bot, prompt.prompt_chat_id, prompt.prompt_message_id)

    # downloads

    async def offer_download(self, filename: str, content: str) -> None:
        if self.chat_id is None:
            return
        await self.bot.send_document(
            chat_id=self.chat_id,
            document=BufferedInputFile(content.encode("utf-8"), filename=filename),
            caption=f"📤 {filename}",
        )
