"""
Конфигурация проекта
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional


def _parse_ids(raw: str) -> List[int]:
    """Разбор списка id через запятую"""
    return [int(part.strip()) for part in raw.split(',') if part.strip()]


@dataclass
class Settings:
    """Настройки приложения"""
    # Telegram
    BOT_TOKEN: str = ''
    ADMIN_IDS: List[int] = field(default_factory=list)

    # База данных
    DB_PATH: str = 'data/bookings.db'
    DB_TIMEOUT_SECONDS: float = 5.0

    # Проверка прав администратора через getChatMember
    ADMIN_CHECK_TIMEOUT_SECONDS: float = 5.0

    # HTTP API для календаря (0 - выключен)
    API_HOST: str = '0.0.0.0'
    API_PORT: int = 0

    # Хранение броней (0 - без очистки)
    RETENTION_DAYS: int = 0
    PURGE_INTERVAL_HOURS: int = 24

    # Страница календаря (WebApp), без завершающего слэша
    PAGES_URL: str = ''

    # Имя владельца, если клиент не прислал своё
    DEFAULT_USER_NAME: str = 'via WebApp'

    def __post_init__(self):
        """Проверка после создания объекта"""
        if not self.BOT_TOKEN:
            raise ValueError("BOT_TOKEN не установлен")
        if self.RETENTION_DAYS < 0:
            raise ValueError("RETENTION_DAYS не может быть отрицательным")

    def is_admin(self, user_id: int) -> bool:
        """Проверка, является ли пользователь администратором бота"""
        return user_id in self.ADMIN_IDS

    @property
    def api_enabled(self) -> bool:
        return self.API_PORT > 0


def load_settings(environ: Optional[dict] = None) -> Settings:
    """Сборка настроек из переменных окружения"""
    env = os.environ if environ is None else environ

    return Settings(
        BOT_TOKEN=env.get('BOT_TOKEN', ''),
        ADMIN_IDS=_parse_ids(env.get('ADMIN_IDS', '')),
        DB_PATH=env.get('DB_PATH', 'data/bookings.db'),
        DB_TIMEOUT_SECONDS=float(env.get('DB_TIMEOUT', '5')),
        ADMIN_CHECK_TIMEOUT_SECONDS=float(env.get('ADMIN_CHECK_TIMEOUT', '5')),
        API_HOST=env.get('API_HOST', '0.0.0.0'),
        API_PORT=int(env.get('API_PORT', '0')),
        RETENTION_DAYS=int(env.get('RETENTION_DAYS', '0')),
        PURGE_INTERVAL_HOURS=int(env.get('PURGE_INTERVAL_HOURS', '24')),
        PAGES_URL=env.get('PAGES_URL', '').strip().rstrip('/'),
        DEFAULT_USER_NAME=env.get('DEFAULT_USER_NAME', '').strip() or 'via WebApp',
    )
