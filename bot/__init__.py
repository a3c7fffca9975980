"""Bot package initialization"""
from .filters import IsAdmin
from .handlers import router
from .panel import TelegramPanel

__all__ = ['router', 'IsAdmin', 'TelegramPanel']
