"""
Итоги обработки заявок и отмен
"""
from dataclasses import dataclass
from typing import Union

STORAGE_UNAVAILABLE = "storage_unavailable"


@dataclass(frozen=True)
class Booked:
    date: str
    owner_name: str


@dataclass(frozen=True)
class Conflict:
    """Дата уже занята другим"""
    date: str
    existing_owner_name: str


@dataclass(frozen=True)
class Removed:
    date: str


@dataclass(frozen=True)
class Denied:
    """Не владелец и не админ"""
    date: str


@dataclass(frozen=True)
class Absent:
    date: str


@dataclass(frozen=True)
class Fault:
    """Сбой инфраструктуры, а не ответ по существу"""
    kind: str


ClaimOutcome = Union[Booked, Conflict, Fault]
CancelOutcome = Union[Removed, Denied, Absent, Fault]
