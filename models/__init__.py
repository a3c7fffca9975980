"""Models package initialization"""
from .monitored_url import MonitoredUrl, UrlStatus
from .notification import Notification, Severity
from .service import ServiceStatus, TimingConfig
from .tab import ActiveTab

__all__ = [
    'ActiveTab',
    'MonitoredUrl',
    'Notification',
    'ServiceStatus',
    'Severity',
    'TimingConfig',
    'UrlStatus',
]
