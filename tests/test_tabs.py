from __future__ import annotations

import pytest

from conftest import ok
from models import ActiveTab
from panel.tabs import TabController


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("tab", "expected"),
    [
        (ActiveTab.DASHBOARD, ["list-urls", "status"]),
        (ActiveTab.URLS, ["list-urls"]),
        (ActiveTab.TIMING, ["show-timing"]),
        (ActiveTab.LOGS, ["logs"]),
        (ActiveTab.SETTINGS, []),
        (ActiveTab.MANUAL, []),
    ],
)
async def test_select_runs_entry_refresh(store, client, tab, expected):
    client.script(
        ok("status", {"running": True}),
        ok("list-urls", {"urls": []}),
        ok("show-timing", {"interval": 30, "timeout": 10}),
        ok("logs", {"logs": []}),
    )
    tabs = TabController(store)

    assert await tabs.select(tab.value) is tab

    assert tabs.active is tab
    assert sorted(client.actions) == expected


@pytest.mark.asyncio
async def test_tab_switches_before_refresh_completes(store, client):
    tabs = TabController(store)
    seen = []
    tabs.subscribe(seen.append)

    # unscripted refresh fails, but the tab is still active
    await tabs.select("logs")

    assert seen == [ActiveTab.LOGS]
    assert tabs.is_active("logs")


@pytest.mark.asyncio
async def test_select_rejects_unknown_tab(store):
    tabs = TabController(store, initial="timing")

    with pytest.raises(ValueError):
        await tabs.select("reports")

    assert tabs.active is ActiveTab.TIMING
