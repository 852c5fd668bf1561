"""
Планировщик периодических задач
"""
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config import Settings
from database.repository import BookingRepository
from utils.dates import days_ago_iso

logger = logging.getLogger(__name__)


async def purge_bookings_job(ledger: BookingRepository, retention_days: int):
    """Задача удаления старых броней"""
    try:
        deleted_count = ledger.purge_before(days_ago_iso(retention_days))
        if deleted_count > 0:
            logger.info(f"Удалено {deleted_count} броней старше {retention_days} дн.")
    except Exception as e:
        logger.error(f"Ошибка при очистке броней: {e}", exc_info=True)


async def start_scheduler(ledger: BookingRepository,
                          settings: Settings) -> Optional[AsyncIOScheduler]:
    """Запуск планировщика задач; без RETENTION_DAYS не нужен"""
    if not settings.RETENTION_DAYS:
        logger.info("Очистка старых броней выключена")
        return None

    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        purge_bookings_job,
        trigger=IntervalTrigger(hours=settings.PURGE_INTERVAL_HOURS),
        args=[ledger, settings.RETENTION_DAYS],
        id='purge_bookings',
        name='Удаление старых броней',
        replace_existing=True
    )

    scheduler.start()
    logger.info("Планировщик задач запущен")

    return scheduler
