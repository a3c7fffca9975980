from __future__ import annotations

import pytest

from conftest import http_error, ok, rejected, text, unreachable
from models import MonitoredUrl, ServiceStatus, Severity, TimingConfig
from panel.errors import ProtocolError
from panel.payloads import parse_url_list
from panel.store import MANUAL_HINT, PanelState


def test_fresh_store_has_nothing_loaded(store):
    state = store.snapshot()

    assert state == PanelState()
    assert state.urls is None
    assert store.urls == ()
    assert store.default_interval() == 30


@pytest.mark.asyncio
async def test_refresh_status_from_envelope(store, client):
    client.script(ok("status", {"running": True}))

    assert await store.refresh_status()
    assert store.service_status.running is True


@pytest.mark.asyncio
async def test_refresh_status_from_plain_text(store, client):
    client.script(text("status", "page-reloader is not running"))

    assert await store.refresh_status()
    assert store.service_status.running is False


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_state(store, client, view):
    client.script(ok("list-urls", {"urls": [{"url": "https://example.com", "interval": 60}]}))
    await store.refresh_urls()
    before = store.snapshot()

    client.scripts.clear()
    client.script(http_error("list-urls", 502))
    assert not await store.refresh_urls()

    assert store.snapshot() is before
    assert len(view.shown) == 1
    assert view.shown[0].severity is Severity.DANGER
    assert "HTTP error 502" in view.shown[0].message


@pytest.mark.asyncio
async def test_unreachable_failure_points_at_manual_commands(store, client, view):
    client.script(unreachable("status"))

    assert not await store.refresh_status()

    assert store.service_status is None
    assert view.shown[-1].message.endswith(MANUAL_HINT)


@pytest.mark.asyncio
async def test_rejected_envelope_is_reported(store, client, view):
    client.script(rejected("logs", "log file missing"))

    assert not await store.refresh_logs()

    assert "log file missing" in view.shown[-1].message


@pytest.mark.asyncio
async def test_refresh_urls_is_idempotent(store, client):
    payload = {
        "urls": [
            {"url": "https://example.com", "status": "online", "interval": 30},
            {"url": "https://example.org", "status": "offline", "interval": 90},
        ]
    }
    client.script(ok("list-urls", payload))

    await store.refresh_urls()
    first = store.snapshot()
    await store.refresh_urls()

    assert store.snapshot() == first
    assert [entry.url for entry in store.urls] == ["https://example.com", "https://example.org"]


@pytest.mark.asyncio
async def test_refresh_urls_collapses_duplicates(store, client):
    payload = {
        "urls": [
            {"url": "https://example.com", "interval": 30},
            {"url": "https://example.org", "interval": 30},
            {"url": "https://example.com", "interval": 120},
        ]
    }
    client.script(ok("list-urls", payload))

    await store.refresh_urls()

    assert [entry.url for entry in store.urls] == ["https://example.com", "https://example.org"]
    assert store.find_url("https://example.com").interval == 120


@pytest.mark.asyncio
async def test_refresh_urls_from_plain_text(store, client):
    client.script(text("list-urls", "Monitored URLs:\nhttps://example.com\n\nhttps://example.org\n"))

    await store.refresh_urls()

    assert [entry.url for entry in store.urls] == ["https://example.com", "https://example.org"]
    assert all(entry.interval == 30 for entry in store.urls)


@pytest.mark.asyncio
async def test_refresh_timing_keeps_numbers_for_text_reply(store, client):
    client.script(ok("show-timing", {"interval": 120, "timeout": 15, "info": "every 2 minutes"}))
    await store.refresh_timing()

    client.scripts.clear()
    client.script(text("show-timing", "Default interval: 120s"))
    await store.refresh_timing()

    assert store.timing == TimingConfig(120, 15, "Default interval: 120s")
    assert store.default_interval() == 120


@pytest.mark.asyncio
async def test_refresh_all_loads_every_entity(store, client):
    client.script(
        ok("status", {"running": True}),
        ok("list-urls", {"urls": []}),
        ok("show-timing", {"interval": 30, "timeout": 10}),
        ok("logs", {"logs": ["line one", "line two"]}),
        ok("system-info", {"info": "OpenWrt 23.05"}),
    )

    assert await store.refresh_all()

    assert store.urls == ()
    assert store.snapshot().urls == ()
    assert store.logs == ("line one", "line two")
    assert store.system_info == "OpenWrt 23.05"
    assert sorted(client.actions) == ["list-urls", "logs", "show-timing", "status", "system-info"]


def test_listeners_see_each_new_snapshot(store):
    seen: list[PanelState] = []
    store.subscribe(seen.append)

    store.set_service_status(ServiceStatus(running=True))
    store.upsert_url(MonitoredUrl("https://example.com"))
    store.unsubscribe(seen.append)
    store.clear_urls()

    assert len(seen) == 2
    assert seen[-1].urls == (MonitoredUrl("https://example.com"),)


def test_upsert_replaces_in_place(store):
    store.replace_urls([MonitoredUrl("https://a.example"), MonitoredUrl("https://b.example")])

    store.upsert_url(MonitoredUrl("https://a.example", interval=90))

    assert [entry.url for entry in store.urls] == ["https://a.example", "https://b.example"]
    assert store.find_url("https://a.example").interval == 90


def test_clear_logs_empties_tail(store):
    store.set_logs(["one", "two"])

    store.clear_logs()

    assert store.snapshot().logs == ()


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ({"urls": "https://a.example\nhttps://b.example"}, ["https://a.example", "https://b.example"]),
        ([{"url": "https://a.example"}, "https://b.example"], ["https://a.example", "https://b.example"]),
        ({"urls": None}, []),
        ({}, []),
    ],
)
def test_url_list_shapes(data, expected):
    assert [entry.url for entry in parse_url_list(data, 30)] == expected


@pytest.mark.parametrize("data", [{"urls": 5}, {"urls": {"url": "https://a.example"}}, 42])
def test_url_list_rejects_unknown_shapes(data):
    with pytest.raises(ProtocolError):
        parse_url_list(data, 30)


@pytest.mark.asyncio
@pytest.mark.parametrize("urls", [5, {"url": "https://example.org"}])
async def test_malformed_url_list_keeps_previous_list(store, client, view, urls):
    store.replace_urls([MonitoredUrl("https://example.com")])
    before = store.snapshot()
    client.script(ok("list-urls", {"urls": urls}))

    assert not await store.refresh_urls()

    assert store.snapshot() is before
    assert view.shown[-1].severity is Severity.DANGER


@pytest.mark.asyncio
async def test_malformed_logs_keep_previous_tail(store, client):
    store.set_logs(["kept"])
    client.script(ok("logs", {"logs": 17}))

    assert not await store.refresh_logs()

    assert store.logs == ("kept",)
