"""
Middleware, передающий сервисы броней в обработчики
"""
from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from config import Settings
from services.arbitrator import ClaimArbitrator


class ServicesMiddleware(BaseMiddleware):
    """Кладёт arbitrator и settings в data каждого события"""

    def __init__(self, arbitrator: ClaimArbitrator, settings: Settings):
        self.arbitrator = arbitrator
        self.settings = settings

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any]
    ) -> Any:
        data["arbitrator"] = self.arbitrator
        data["settings"] = self.settings

        # Продолжение обработки
        return await handler(event, data)
