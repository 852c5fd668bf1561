"""
Модуль для работы с базой данных SQLite
"""
import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Generator

logger = logging.getLogger(__name__)


class StorageUnavailable(Exception):
    """База данных недоступна или запрос упал не по вине данных"""


class Database:
    """Фабрика подключений к SQLite"""

    def __init__(self, path: str, timeout: float = 5.0):
        self.path = path
        self.timeout = timeout

    def get_connection(self) -> sqlite3.Connection:
        """Получение подключения к БД"""
        try:
            conn = sqlite3.connect(self.path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise StorageUnavailable(f"Не удалось открыть БД {self.path}: {e}") from e
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def get_db(self) -> Generator[sqlite3.Connection, None, None]:
        """Контекстный менеджер для работы с БД"""
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError:
            # Нарушение ограничений - это ответ про данные, а не сбой хранилища
            conn.rollback()
            raise
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageUnavailable(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_db(self):
        """Инициализация базы данных"""
        # Создание директории для БД, если не существует
        db_dir = os.path.dirname(self.path)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir)

        with self.get_db() as conn:
            cursor = conn.cursor()

            # Одна бронь на дату в чате: уникальность держит первичный ключ
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS bookings (
                    chat_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    user_id INTEGER NOT NULL DEFAULT 0,
                    user_name TEXT,
                    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (chat_id, date)
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_bookings_date
                ON bookings(date)
            """)

        logger.info(f"Схема БД готова: {self.path}")
