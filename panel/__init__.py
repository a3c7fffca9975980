"""Panel engine: transport, state, scheduling and actions."""
from .context import AppContext
from .notifications import NotificationQueue
from .scheduler import AutoRefreshScheduler
from .store import PanelState, ViewModelStore
from .tabs import TabController
from .transport import ControlClient

__all__ = [
    "AppContext",
    "AutoRefreshScheduler",
    "ControlClient",
    "NotificationQueue",
    "PanelState",
    "TabController",
    "ViewModelStore",
]
