"""
Tests for panel data models
"""
import pytest

from models import ActiveTab, MonitoredUrl, UrlStatus


class TestMonitoredUrl:
    """Test MonitoredUrl model functionality"""

    def test_from_payload(self):
        entry = MonitoredUrl.from_payload(
            {"url": "https://example.com", "status": "online", "interval": 120, "defaultInterval": 30},
            default_interval=60,
        )

        assert entry.url == "https://example.com"
        assert entry.status is UrlStatus.ONLINE
        assert entry.interval == 120
        assert entry.default_interval == 30
        assert entry.is_custom_interval

    def test_from_payload_fills_missing_intervals(self):
        entry = MonitoredUrl.from_payload({"url": "https://example.com"}, default_interval=45)

        assert entry.interval == 45
        assert entry.default_interval == 45
        assert entry.status is UrlStatus.UNKNOWN
        assert not entry.is_custom_interval

    def test_unknown_status_maps_to_unknown(self):
        assert UrlStatus.parse("weird") is UrlStatus.UNKNOWN
        assert UrlStatus.parse(" OFFLINE ") is UrlStatus.OFFLINE

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            MonitoredUrl("https://example.com", interval=0)

    def test_rejects_empty_url(self):
        with pytest.raises(ValueError):
            MonitoredUrl("")


class TestActiveTab:
    def test_coerce_accepts_strings(self):
        assert ActiveTab.coerce("logs") is ActiveTab.LOGS
        assert ActiveTab.coerce(ActiveTab.MANUAL) is ActiveTab.MANUAL

    def test_coerce_rejects_unknown(self):
        with pytest.raises(ValueError):
            ActiveTab.coerce("reports")
