"""
Проверка прав администратора чата через Telegram
"""
import asyncio
import logging

from aiogram import Bot
from aiogram.enums import ChatMemberStatus
from aiogram.exceptions import TelegramAPIError
from aiohttp import ClientError

from config import Settings

logger = logging.getLogger(__name__)

ADMIN_STATUSES = (ChatMemberStatus.CREATOR, ChatMemberStatus.ADMINISTRATOR)


class TelegramAdminChecker:
    """
    Админ чата - создатель или администратор по getChatMember,
    а также любой пользователь из ADMIN_IDS.
    Проверка best-effort: если Telegram не ответил, пользователь не админ.
    """

    def __init__(self, bot: Bot, settings: Settings):
        self.bot = bot
        self.settings = settings

    async def is_admin(self, chat_id: str, user_id: int) -> bool:
        if user_id <= 0:
            return False

        if self.settings.is_admin(user_id):
            return True

        try:
            member = await asyncio.wait_for(
                self.bot.get_chat_member(chat_id=int(chat_id), user_id=user_id),
                timeout=self.settings.ADMIN_CHECK_TIMEOUT_SECONDS
            )
        except (TelegramAPIError, ClientError, OSError, asyncio.TimeoutError) as e:
            logger.warning(f"Не удалось проверить права {user_id} в чате {chat_id}: {e}")
            return False

        return member.status in ADMIN_STATUSES
