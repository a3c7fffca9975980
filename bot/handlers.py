"""Telegram handlers driving the control panel."""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from aiogram import F, Router
from aiogram.filters import Command, CommandStart
from aiogram.types import CallbackQuery, Message

from bot.filters import IsAdmin
from bot.panel import TelegramPanel
from models import ActiveTab
from panel.context import AppContext

logger = logging.getLogger(__name__)
router = Router()

CANCEL_WORDS = {"/cancel", "cancel"}

HELP_TEXT = (
    "🔄 <b>Page Reloader panel</b>\n\n"
    "/panel - Open the control panel in this chat\n"
    "/help - Show this help\n\n"
    "Reply <code>cancel</code> to any prompt to abort it."
)


def split_add_reply(text: str) -> tuple[str, str | None]:
    """Split ``"<url> [interval]"`` as typed in reply to the add prompt."""
    parts = text.split()
    if not parts:
        return "", None
    interval = parts[1] if len(parts) > 1 else None
    return parts[0], interval


async def _open_panel(message: Message, panel: AppContext, screen: TelegramPanel) -> None:
    await screen.open_in(message.chat.id)
    panel.show()
    await panel.tabs.select(panel.tabs.active)


@router.message(CommandStart())
async def cmd_start(message: Message, panel: AppContext, screen: TelegramPanel) -> None:
    user_id = message.from_user.id if message.from_user else None
    logger.info("User %s started the bot", user_id)

    if await IsAdmin()(message):
        await message.answer(HELP_TEXT, parse_mode="HTML")
        await _open_panel(message, panel, screen)
    else:
        await message.answer("👋 This bot is available to administrators only.")


@router.message(Command("panel"), IsAdmin())
async def cmd_panel(message: Message, panel: AppContext, screen: TelegramPanel) -> None:
    await _open_panel(message, panel, screen)


@router.message(Command("help"), IsAdmin())
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT, parse_mode="HTML")


@router.callback_query(IsAdmin(), F.data == "panel:close")
async def close_callback(call: CallbackQuery, panel: AppContext, screen: TelegramPanel) -> None:
    await call.answer("Panel closed")
    panel.hide()
    await screen.close()


@router.callback_query(IsAdmin(), F.data.startswith("tab:"))
async def tab_callback(call: CallbackQuery, panel: AppContext) -> None:
    name = (call.data or "").split(":", 1)[1]
    try:
        tab = ActiveTab.coerce(name)
    except ValueError:
        await call.answer("Unknown tab", show_alert=True)
        return
    await call.answer()
    await panel.tabs.select(tab)


@router.callback_query(IsAdmin(), F.data.startswith("refresh:"))
async def refresh_callback(call: CallbackQuery, panel: AppContext) -> None:
    target = (call.data or "").split(":", 1)[1]
    refreshes: dict[str, Callable[[], Awaitable[bool]]] = {
        "dashboard": panel.store.refresh_dashboard,
        "urls": panel.store.refresh_urls,
        "timing": panel.store.refresh_timing,
        "logs": panel.store.refresh_logs,
        "settings": panel.store.refresh_system_info,
    }
    refresh = refreshes.get(target)
    if refresh is None:
        await call.answer()
        return
    await call.answer("Refreshing…")
    await refresh()


@router.callback_query(IsAdmin(), F.data.startswith("svc:"))
async def service_callback(call: CallbackQuery, panel: AppContext, screen: TelegramPanel) -> None:
    action = (call.data or "").split(":", 1)[1]
    handlers: dict[str, Callable[[], Awaitable[bool]]] = {
        "start": panel.service.start,
        "stop": panel.service.stop,
        "restart": panel.service.restart,
        "autostart-on": panel.service.enable_autostart,
        "autostart-off": panel.service.disable_autostart,
        "uninstall": panel.service.uninstall,
    }
    handler = handlers.get(action)
    if handler is None:
        await call.answer()
        return
    await call.answer()
    done = await handler()
    if done and action == "uninstall":
        await screen.close()


@router.callback_query(IsAdmin(), F.data.startswith("urls:"))
async def urls_callback(call: CallbackQuery, panel: AppContext, screen: TelegramPanel) -> None:
    action = (call.data or "").split(":", 1)[1]
    await call.answer()

    if action == "add":
        async def add_from_reply(text: Any) -> bool:
            url, interval = split_add_reply(str(text))
            return await panel.urls.add(url, interval)

        await screen.prompt(
            "Send the URL to monitor, optionally followed by a check interval in seconds "
            "(e.g. https://example.com 600).",
            add_from_reply,
        )
    elif action == "test-all":
        await panel.urls.test_all()
    elif action == "clear":
        await panel.urls.clear_all()


@router.callback_query(IsAdmin(), F.data.startswith("timing:"))
async def timing_callback(call: CallbackQuery, panel: AppContext, screen: TelegramPanel) -> None:
    parts = (call.data or "").split(":", 2)
    action = parts[1] if len(parts) > 1 else ""
    await call.answer()

    if action == "interval":
        await screen.prompt("Send the new default check interval in seconds (5 or more):",
                            panel.timing.set_default_interval)
    elif action == "timeout":
        await screen.prompt("Send the new request timeout in seconds (1 or more):",
                            panel.timing.set_timeout)
    elif action == "preset" and len(parts) > 2:
        await panel.timing.apply_preset(parts[2])


@router.callback_query(IsAdmin(), F.data.startswith("logs:"))
async def logs_callback(call: CallbackQuery, panel: AppContext) -> None:
    await call.answer()
    if call.data == "logs:clear":
        panel.store.clear_logs()


@router.callback_query(IsAdmin(), F.data.startswith("cfg:"))
async def config_callback(call: CallbackQuery, panel: AppContext, screen: TelegramPanel) -> None:
    await call.answer()
    if call.data == "cfg:export":
        await panel.config.export()
    elif call.data == "cfg:import":
        await screen.prompt(
            "Reply with the configuration file to import.",
            panel.config.import_config,
            accepts_document=True,
        )


@router.callback_query(IsAdmin(), F.data.startswith("bind:"))
async def bound_callback(call: CallbackQuery, screen: TelegramPanel) -> None:
    callback = screen.bindings.resolve(call.data or "")
    if callback is None:
        await call.answer("This button has expired, refresh the panel.", show_alert=True)
        return
    await call.answer()
    await callback()


@router.callback_query(IsAdmin(), F.data.startswith("confirm:"))
async def confirm_callback(call: CallbackQuery, screen: TelegramPanel) -> None:
    parts = (call.data or "").split(":")
    if len(parts) != 3 or not screen.resolve_confirmation(parts[1], parts[2] == "yes"):
        await call.answer("This question is no longer pending.", show_alert=True)
        return
    await call.answer()


@router.message(IsAdmin(), F.reply_to_message)
async def prompt_reply_handler(message: Message, screen: TelegramPanel) -> None:
    """Feed replies to ForceReply prompts into the action that asked for them."""
    reply_to = message.reply_to_message
    if reply_to is None:
        return
    pending = screen.take_prompt(reply_to.message_id)
    if pending is None:
        return

    bot = message.bot
    text = (message.text or "").strip()
    await screen.discard_prompt(pending)

    if text.lower() in CANCEL_WORDS:
        await message.answer("Action cancelled")
        return

    if pending.accepts_document and message.document is not None and bot is not None:
        buffer = await bot.download(message.document)
        if buffer is None:
            await message.answer("❌ Could not download the file")
            return
        await pending.handler(buffer.read())
        return

    await pending.handler(text)
