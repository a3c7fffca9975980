"""
Filters for bot handlers
"""
import logging
from typing import Optional, Union

from aiogram.filters import Filter
from aiogram.types import CallbackQuery, Message

from config import settings

logger = logging.getLogger(__name__)


def _chat_id(event: Union[Message, CallbackQuery]) -> Optional[int]:
    if isinstance(event, CallbackQuery):
        message = event.message
        return message.chat.id if message is not None else None
    return event.chat.id


class IsAdmin(Filter):
    """Lets an update through when its sender or its chat is a configured admin.

    The panel lives in one chat, so a group listed in ``ADMIN_CHAT_IDS`` can be
    driven by any of its members.
    """

    async def __call__(self, event: Union[Message, CallbackQuery]) -> bool:
        user_id = event.from_user.id if event.from_user else None
        allowed = settings.ADMIN_CHAT_IDS
        if user_id in allowed or _chat_id(event) in allowed:
            return True
        logger.debug("Ignoring update from non-admin user %s", user_id)
        return False
