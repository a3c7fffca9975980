"""Message text and keyboards for each panel tab."""
from __future__ import annotations

from html import escape
from typing import Callable, Optional, Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from models import ActiveTab, MonitoredUrl, Notification, Severity, UrlStatus
from panel.store import PanelState

MAX_MESSAGE_LENGTH = 4000
MAX_LOG_LINES = 30
MAX_LOG_CHARS = 3000
NO_DATA = "<i>No data yet</i>"

TAB_LABELS = {
    ActiveTab.DASHBOARD: "📊 Dashboard",
    ActiveTab.URLS: "🌐 URLs",
    ActiveTab.TIMING: "⏰ Timing",
    ActiveTab.LOGS: "📜 Logs",
    ActiveTab.SETTINGS: "⚙️ Settings",
    ActiveTab.MANUAL: "💻 Manual",
}

SEVERITY_ICONS = {
    Severity.INFO: "ℹ️",
    Severity.SUCCESS: "✅",
    Severity.WARNING: "⚠️",
    Severity.DANGER: "❌",
}

STATUS_ICONS = {
    UrlStatus.ONLINE: "✅",
    UrlStatus.OFFLINE: "❌",
    UrlStatus.UNKNOWN: "❓",
}

MANUAL_COMMANDS = (
    ("page-reloader start", "Start the service"),
    ("page-reloader stop", "Stop the service"),
    ("page-reloader restart", "Restart the service"),
    ("page-reloader status", "Show service status"),
    ("page-reloader list-urls", "List monitored URLs"),
    ('page-reloader add-url "URL"', "Add a URL"),
    ('page-reloader remove-url "URL"', "Remove a URL"),
    ('page-reloader set-url-interval "URL" SECONDS', "Set a URL's check interval"),
    ("page-reloader test-all", "Test every URL"),
    ("page-reloader set-interval SECONDS", "Set the default interval"),
    ("page-reloader set-timeout SECONDS", "Set the request timeout"),
    ("page-reloader logs", "Show recent log lines"),
)

ButtonSpec = tuple[str, str]
UrlButtons = Callable[[MonitoredUrl], Sequence[ButtonSpec]]


def format_interval(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    return f"{seconds // 3600}h"


def format_notification(notification: Notification) -> str:
    icon = SEVERITY_ICONS.get(notification.severity, "")
    return f"{icon} {escape(notification.message)}".strip()


def _truncate(text: str) -> str:
    if len(text) <= MAX_MESSAGE_LENGTH:
        return text
    return text[: MAX_MESSAGE_LENGTH - 1].rstrip() + "…"


def _tab_rows(builder: InlineKeyboardBuilder, active: ActiveTab) -> None:
    buttons = [
        InlineKeyboardButton(
            text=f"• {label}" if tab is active else label,
            callback_data=f"tab:{tab.value}",
        )
        for tab, label in TAB_LABELS.items()
    ]
    builder.row(*buttons[:3])
    builder.row(*buttons[3:])


def _dashboard(state: PanelState, builder: InlineKeyboardBuilder) -> list[str]:
    lines = ["📊 <b>Dashboard</b>", ""]
    if state.service is None:
        lines.append(f"🔧 Service: {NO_DATA}")
    else:
        label = "🟢 Running" if state.service.running else "🔴 Stopped"
        lines.append(f"🔧 Service: <b>{label}</b>")

    if state.urls is None:
        lines.append(f"📝 Monitored URLs: {NO_DATA}")
    else:
        online = sum(1 for entry in state.urls if entry.status is UrlStatus.ONLINE)
        lines.append(f"📝 Monitored URLs: <b>{len(state.urls)}</b> ({online} online)")

    if state.service is not None:
        checked = state.service.checked_at.astimezone().strftime("%H:%M:%S")
        lines.append(f"🕒 Last check: {checked}")

    builder.row(
        InlineKeyboardButton(text="▶️ Start", callback_data="svc:start"),
        InlineKeyboardButton(text="⏹ Stop", callback_data="svc:stop"),
        InlineKeyboardButton(text="🔁 Restart", callback_data="svc:restart"),
    )
    builder.row(
        InlineKeyboardButton(text="➕ Quick add URL", callback_data="urls:add"),
        InlineKeyboardButton(text="🔄 Refresh", callback_data="refresh:dashboard"),
    )
    return lines


def _urls(state: PanelState, builder: InlineKeyboardBuilder, url_buttons: Optional[UrlButtons]) -> list[str]:
    lines = ["🌐 <b>Monitored URLs</b>", ""]
    if state.urls is None:
        lines.append(NO_DATA)
    elif not state.urls:
        lines.append("<i>No URLs configured</i>")
    for index, entry in enumerate(state.urls or (), start=1):
        kind = "custom" if entry.is_custom_interval else "default"
        lines.append(
            f"{index}. {STATUS_ICONS[entry.status]} {escape(entry.url)}\n"
            f"    every {format_interval(entry.interval)} ({kind})"
        )
        if url_buttons is not None:
            builder.row(
                *(
                    InlineKeyboardButton(text=f"{index}. {text}", callback_data=data)
                    for text, data in url_buttons(entry)
                )
            )

    builder.row(
        InlineKeyboardButton(text="➕ Add URL", callback_data="urls:add"),
        InlineKeyboardButton(text="🧪 Test all", callback_data="urls:test-all"),
        InlineKeyboardButton(text="🔄 Refresh", callback_data="refresh:urls"),
    )
    return lines


def _timing(state: PanelState, builder: InlineKeyboardBuilder, presets: Sequence[str]) -> list[str]:
    lines = ["⏰ <b>Timing</b>", ""]
    timing = state.timing
    if timing is None:
        lines.append(NO_DATA)
    else:
        lines.append(f"Default interval: <b>{format_interval(timing.default_interval_seconds)}</b>")
        lines.append(f"Request timeout: <b>{timing.timeout_seconds}s</b>")
        if timing.info_text:
            lines.extend(["", f"<pre>{escape(timing.info_text)}</pre>"])

    builder.row(
        InlineKeyboardButton(text="⏱ Default interval", callback_data="timing:interval"),
        InlineKeyboardButton(text="⏳ Timeout", callback_data="timing:timeout"),
    )
    if presets:
        builder.row(
            *(
                InlineKeyboardButton(text=f"🎛 {preset}", callback_data=f"timing:preset:{preset}")
                for preset in presets
            )
        )
    builder.row(InlineKeyboardButton(text="🔄 Refresh", callback_data="refresh:timing"))
    return lines


def _logs(state: PanelState, builder: InlineKeyboardBuilder) -> list[str]:
    lines = ["📜 <b>Logs</b>", ""]
    if state.logs is None:
        lines.append(NO_DATA)
    elif not state.logs:
        lines.append("<i>No logs available</i>")
    else:
        tail = "\n".join(state.logs[-MAX_LOG_LINES:])[-MAX_LOG_CHARS:]
        lines.append(f"<pre>{escape(tail)}</pre>")
    builder.row(
        InlineKeyboardButton(text="🔄 Refresh", callback_data="refresh:logs"),
        InlineKeyboardButton(text="🧹 Clear display", callback_data="logs:clear"),
    )
    return lines


def _settings(state: PanelState, builder: InlineKeyboardBuilder) -> list[str]:
    lines = ["⚙️ <b>Settings</b>", "", "<b>System information</b>"]
    if state.system_info is None:
        lines.append(NO_DATA)
    else:
        lines.append(f"<pre>{escape(state.system_info or 'No system information available')}</pre>")
    builder.row(
        InlineKeyboardButton(text="✅ Enable auto-start", callback_data="svc:autostart-on"),
        InlineKeyboardButton(text="🚫 Disable auto-start", callback_data="svc:autostart-off"),
    )
    builder.row(
        InlineKeyboardButton(text="📤 Export config", callback_data="cfg:export"),
        InlineKeyboardButton(text="📥 Import config", callback_data="cfg:import"),
    )
    builder.row(
        InlineKeyboardButton(text="🗑 Clear all URLs", callback_data="urls:clear"),
        InlineKeyboardButton(text="💣 Uninstall", callback_data="svc:uninstall"),
    )
    builder.row(InlineKeyboardButton(text="🔄 Refresh", callback_data="refresh:settings"))
    return lines


def _manual() -> list[str]:
    lines = ["💻 <b>Manual commands</b>", "", "Run these over SSH when the API is unreachable:", ""]
    for command, description in MANUAL_COMMANDS:
        lines.append(f"<code>{escape(command)}</code> - {description}")
    return lines


def compose_tab(
    tab: ActiveTab,
    state: PanelState,
    *,
    url_buttons: Optional[UrlButtons] = None,
    presets: Sequence[str] = (),
) -> tuple[str, InlineKeyboardMarkup]:
    """Build the panel message for ``tab`` from a store snapshot."""
    builder = InlineKeyboardBuilder()
    _tab_rows(builder, tab)

    if tab is ActiveTab.DASHBOARD:
        lines = _dashboard(state, builder)
    elif tab is ActiveTab.URLS:
        lines = _urls(state, builder, url_buttons)
    elif tab is ActiveTab.TIMING:
        lines = _timing(state, builder, presets)
    elif tab is ActiveTab.LOGS:
        lines = _logs(state, builder)
    elif tab is ActiveTab.SETTINGS:
        lines = _settings(state, builder)
    else:
        lines = _manual()

    builder.row(InlineKeyboardButton(text="✖️ Close panel", callback_data="panel:close"))
    return _truncate("\n".join(lines)), builder.as_markup()


def confirmation_keyboard(token: str) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="✅ Yes", callback_data=f"confirm:{token}:yes"),
        InlineKeyboardButton(text="✖️ No", callback_data=f"confirm:{token}:no"),
    )
    return builder.as_markup()
