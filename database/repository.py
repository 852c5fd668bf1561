"""
Репозиторий для работы с данными
"""
import sqlite3
from datetime import datetime
from typing import List, Optional

from database.database import Database
from database.models import Booking


class BookingRepository:
    """Реестр броней: одна запись на пару (chat_id, date)"""

    def __init__(self, db: Database):
        self.db = db

    def try_insert(self, chat_id: str, date: str, user_id: int,
                   user_name: Optional[str]) -> bool:
        """
        Вставка брони, если дата ещё свободна.
        Возвращает False, если на эту дату в чате уже есть бронь.
        Решение принимает первичный ключ таблицы, а не предварительный SELECT,
        поэтому из двух одновременных вставок проходит ровно одна.
        """
        try:
            with self.db.get_db() as conn:
                conn.execute("""
                    INSERT INTO bookings (chat_id, date, user_id, user_name, created_at)
                    VALUES (?, ?, ?, ?, ?)
                """, (chat_id, date, user_id, user_name, datetime.now().isoformat(sep=' ')))
        except sqlite3.IntegrityError:
            return False
        return True

    def find(self, chat_id: str, date: str) -> Optional[Booking]:
        """Получение брони по чату и дате"""
        with self.db.get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM bookings WHERE chat_id = ? AND date = ?",
                (chat_id, date)
            )
            row = cursor.fetchone()
            return self._row_to_booking(row) if row else None

    def delete(self, chat_id: str, date: str) -> bool:
        """Удаление брони; повторное удаление не ошибка"""
        with self.db.get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM bookings WHERE chat_id = ? AND date = ?",
                (chat_id, date)
            )
            return cursor.rowcount > 0

    def list(self, chat_id: str, since: Optional[str] = None) -> List[Booking]:
        """Брони чата по возрастанию даты, при необходимости начиная с since"""
        query = "SELECT * FROM bookings WHERE chat_id = ?"
        params = [chat_id]

        if since is not None:
            query += " AND date >= ?"
            params.append(since)

        query += " ORDER BY date"

        with self.db.get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            rows = cursor.fetchall()
            return [self._row_to_booking(row) for row in rows]

    def purge_before(self, date: str) -> int:
        """Удаление броней всех чатов с датой раньше date"""
        with self.db.get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM bookings WHERE date < ?", (date,))
            return cursor.rowcount

    def count(self) -> int:
        with self.db.get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) as count FROM bookings")
            return cursor.fetchone()['count']

    def ping(self) -> bool:
        """Проверка, что БД отвечает"""
        with self.db.get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 as ok")
            return cursor.fetchone()['ok'] == 1

    @staticmethod
    def _row_to_booking(row) -> Booking:
        """Преобразование строки БД в объект Booking"""
        created_at = row['created_at']
        return Booking(
            chat_id=row['chat_id'],
            date=row['date'],
            user_id=row['user_id'],
            user_name=row['user_name'],
            created_at=datetime.fromisoformat(created_at) if created_at else None
        )
