"""
Обработчики команд администраторов бота
"""
import logging

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from config import Settings
from database.database import StorageUnavailable
from services.arbitrator import ClaimArbitrator

logger = logging.getLogger(__name__)
router = Router()


@router.message(Command("status"))
async def cmd_status(message: Message, arbitrator: ClaimArbitrator, settings: Settings):
    """Команда /status - состояние БД и API"""
    if message.from_user is None or not settings.is_admin(message.from_user.id):
        await message.answer("⚠️ You don't have access to this command")
        return

    try:
        db_ok = arbitrator.ledger.ping()
        rows = arbitrator.ledger.count()
    except StorageUnavailable as e:
        logger.error(f"/status: БД недоступна: {e}")
        db_ok, rows = False, 0

    api = f"{settings.API_HOST}:{settings.API_PORT}" if settings.api_enabled else "disabled"
    retention = f"{settings.RETENTION_DAYS} days" if settings.RETENTION_DAYS else "forever"

    await message.answer(
        f"⚙️ Status\n\n"
        f"DB: {'ok' if db_ok else 'unavailable'}\n"
        f"Bookings: {rows}\n"
        f"HTTP API: {api}\n"
        f"Retention: {retention}"
    )
