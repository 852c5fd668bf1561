"""
Модели данных для работы с БД
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

# user_id брони, созданной до того, как стали хранить владельца
LEGACY_USER_ID = 0


@dataclass
class Booking:
    """Модель бронирования: одна дата в одном чате"""
    chat_id: str
    date: str  # YYYY-MM-DD
    user_id: int
    user_name: Optional[str]
    created_at: Optional[datetime] = None

    @property
    def is_legacy(self) -> bool:
        """Бронь без известного владельца"""
        return self.user_id == LEGACY_USER_ID
