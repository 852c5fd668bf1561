"""
Главный файл Telegram-бота бронирования дат в группах
"""
import asyncio
import logging

from aiogram import Bot, Dispatcher

from api.server import start_api
from config import load_settings
from database.database import Database
from database.repository import BookingRepository
from handlers import admin_handlers, booking_handlers
from middlewares.services import ServicesMiddleware
from services.admin_check import TelegramAdminChecker
from services.arbitrator import ClaimArbitrator
from utils.scheduler import start_scheduler

# Настройка логирования
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def main():
    """Основная функция запуска бота"""
    logger.info("Запуск бота...")
    settings = load_settings()

    # Инициализация БД
    db = Database(settings.DB_PATH, timeout=settings.DB_TIMEOUT_SECONDS)
    db.init_db()
    ledger = BookingRepository(db)
    logger.info("База данных инициализирована")

    # Создание бота и диспетчера
    bot = Bot(token=settings.BOT_TOKEN)
    dp = Dispatcher()

    arbitrator = ClaimArbitrator(ledger, TelegramAdminChecker(bot, settings))

    # Сервисы броней доступны в обработчиках как аргументы
    dp.message.outer_middleware(ServicesMiddleware(arbitrator, settings))

    # Регистрация роутеров
    dp.include_router(booking_handlers.router)
    dp.include_router(admin_handlers.router)

    # HTTP API для календаря
    runner = await start_api(arbitrator, settings) if settings.api_enabled else None

    # Запуск планировщика очистки старых броней
    scheduler = await start_scheduler(ledger, settings)

    try:
        logger.info("Бот успешно запущен")
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        if scheduler:
            scheduler.shutdown()
        if runner:
            await runner.cleanup()
        await bot.session.close()
        logger.info("Бот остановлен")


if __name__ == '__main__':
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Бот остановлен пользователем")
    except Exception as e:
        logger.error(f"Критическая ошибка: {e}", exc_info=True)
