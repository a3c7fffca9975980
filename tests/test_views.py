from __future__ import annotations

import pytest

from bot.bindings import CallbackBindings
from bot.views import NO_DATA, compose_tab, format_interval, format_notification
from models import ActiveTab, MonitoredUrl, Notification, ServiceStatus, Severity, TimingConfig, UrlStatus
from panel.store import PanelState


def callback_data(markup):
    return [button.callback_data for row in markup.inline_keyboard for button in row]


@pytest.mark.parametrize(("seconds", "expected"), [(30, "30s"), (600, "10m"), (7200, "2h")])
def test_format_interval(seconds, expected):
    assert format_interval(seconds) == expected


def test_notification_text_is_escaped():
    text = format_notification(Notification("Failed: <timeout>", Severity.DANGER))

    assert text == "❌ Failed: &lt;timeout&gt;"


@pytest.mark.parametrize("tab", [ActiveTab.DASHBOARD, ActiveTab.URLS, ActiveTab.TIMING, ActiveTab.LOGS])
def test_unloaded_state_shows_placeholder(tab):
    text, _ = compose_tab(tab, PanelState())

    assert NO_DATA in text


def test_every_tab_has_navigation_and_close():
    for tab in ActiveTab:
        _, markup = compose_tab(tab, PanelState())
        data = callback_data(markup)

        assert [item for item in data if item.startswith("tab:")] == [f"tab:{t.value}" for t in ActiveTab]
        assert data[-1] == "panel:close"


def test_active_tab_is_marked():
    _, markup = compose_tab(ActiveTab.LOGS, PanelState())
    labels = [button.text for button in markup.inline_keyboard[0] + markup.inline_keyboard[1]]

    assert [label for label in labels if label.startswith("• ")] == ["• 📜 Logs"]


def test_dashboard_summarises_service_and_urls():
    state = PanelState(
        service=ServiceStatus(running=True),
        urls=(
            MonitoredUrl("https://example.com", UrlStatus.ONLINE),
            MonitoredUrl("https://example.org", UrlStatus.OFFLINE),
        ),
    )

    text, markup = compose_tab(ActiveTab.DASHBOARD, state)

    assert "Running" in text
    assert "<b>2</b> (1 online)" in text
    assert {"svc:start", "svc:stop", "svc:restart", "urls:add"} <= set(callback_data(markup))


def test_url_rows_use_bound_buttons():
    bindings = CallbackBindings()
    state = PanelState(urls=(MonitoredUrl("https://example.com/?a=1&b=2", interval=90),))

    async def noop():
        return None

    def buttons(entry):
        return [("Test", bindings.bind(noop)), ("Remove", bindings.bind(noop))]

    text, markup = compose_tab(ActiveTab.URLS, state, url_buttons=buttons)

    assert "https://example.com/?a=1&amp;b=2" in text
    assert "every 1m (custom)" in text
    assert [item for item in callback_data(markup) if item.startswith("bind:")] == ["bind:1", "bind:2"]


def test_empty_url_list_differs_from_unloaded():
    text, _ = compose_tab(ActiveTab.URLS, PanelState(urls=()))

    assert "No URLs configured" in text
    assert NO_DATA not in text


def test_timing_tab_lists_presets():
    state = PanelState(timing=TimingConfig(600, 10, "Checks every 10 minutes"))

    text, markup = compose_tab(ActiveTab.TIMING, state, presets=("fast", "slow"))

    assert "<b>10m</b>" in text
    assert "timing:preset:fast" in callback_data(markup)
    assert "timing:preset:slow" in callback_data(markup)


def test_long_logs_are_tailed():
    state = PanelState(logs=tuple(f"line {number}" for number in range(500)))

    text, _ = compose_tab(ActiveTab.LOGS, state)

    assert "line 499" in text
    assert "line 100\n" not in text
    assert len(text) <= 4000


def test_manual_tab_lists_commands():
    text, markup = compose_tab(ActiveTab.MANUAL, PanelState())

    assert "<code>page-reloader restart</code>" in text
    assert callback_data(markup)[-1] == "panel:close"


def test_settings_tab_offers_destructive_actions():
    _, markup = compose_tab(ActiveTab.SETTINGS, PanelState(system_info="OpenWrt"))

    assert {"cfg:export", "cfg:import", "urls:clear", "svc:uninstall"} <= set(callback_data(markup))


class TestBindings:
    def test_resolve_returns_bound_callback(self):
        bindings = CallbackBindings()

        async def callback():
            return None

        data = bindings.bind(callback)

        assert bindings.resolve(data) is callback
        assert len(data.encode()) <= 64

    def test_reset_expires_old_tokens(self):
        bindings = CallbackBindings()

        async def callback():
            return None

        data = bindings.bind(callback)
        bindings.reset()

        assert bindings.resolve(data) is None
        assert len(bindings) == 0

    def test_foreign_data_is_ignored(self):
        assert CallbackBindings().resolve("tab:logs") is None
