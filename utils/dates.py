"""
Утилиты для работы с датами броней
"""
from datetime import date, datetime, timedelta
from typing import Optional, Union

DATE_FORMAT = "%Y-%m-%d"


def normalize_date(value: Union[str, date, datetime]) -> str:
    """
    Приведение даты к каноническому виду YYYY-MM-DD.
    Строка обязана быть реальной календарной датой, иначе ValueError.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValueError(f"Дата должна быть строкой, получено {type(value).__name__}")

    text = value.strip()
    parsed = datetime.strptime(text, DATE_FORMAT)
    return parsed.date().isoformat()


def today_iso(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).date().isoformat()


def days_ago_iso(days: int, now: Optional[datetime] = None) -> str:
    """Дата N дней назад в формате YYYY-MM-DD"""
    return ((now or datetime.now()) - timedelta(days=days)).date().isoformat()


def format_date(value: str) -> str:
    """Форматирование даты брони для сообщений: '2025-06-01 (Sun)'"""
    weekdays = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
    parsed = datetime.strptime(value, DATE_FORMAT)
    return f"{value} ({weekdays[parsed.weekday()]})"
