"""
Арбитр броней: превращает заявку или отмену в изменение реестра и итог
"""
import logging
from typing import List, Optional, Protocol

from database.database import StorageUnavailable
from database.models import Booking
from database.repository import BookingRepository
from services.outcomes import (
    STORAGE_UNAVAILABLE, Absent, Booked, CancelOutcome, ClaimOutcome,
    Conflict, Denied, Fault, Removed
)
from services.requests import CancelRequest, ClaimRequest, ListQuery

logger = logging.getLogger(__name__)


class AdminChecker(Protocol):
    async def is_admin(self, chat_id: str, user_id: int) -> bool:
        ...


def _same_name(left: Optional[str], right: Optional[str]) -> bool:
    left = (left or '').strip().casefold()
    right = (right or '').strip().casefold()
    return bool(left) and left == right


def is_owner(booking: Booking, user_id: int, user_name: Optional[str] = None) -> bool:
    """
    Владелец - тот же user_id. Для старых броней без user_id (0)
    владельцем считается любой, чьё имя совпадает без учёта регистра.
    Совпадение имён у разных людей тут не различить.
    """
    if booking.user_id == user_id:
        return True
    return booking.is_legacy and _same_name(booking.user_name, user_name)


class ClaimArbitrator:
    """Заявки и отмены броней; состояния между запросами не хранит"""

    def __init__(self, ledger: BookingRepository, admin_checker: AdminChecker):
        self.ledger = ledger
        self.admin_checker = admin_checker

    async def claim(self, request: ClaimRequest) -> ClaimOutcome:
        """Занять дату: Booked, Conflict или Fault"""
        try:
            inserted = self.ledger.try_insert(
                request.chat_id, request.date, request.user_id, request.user_name
            )
            if inserted:
                logger.info(
                    f"Бронь {request.chat_id}/{request.date} за {request.user_id} ({request.user_name})"
                )
                return Booked(date=request.date, owner_name=request.user_name)

            holder = self.ledger.find(request.chat_id, request.date)
        except StorageUnavailable as e:
            logger.error(f"Хранилище недоступно при заявке {request.chat_id}/{request.date}: {e}",
                         exc_info=True)
            return Fault(kind=STORAGE_UNAVAILABLE)

        # Бронь могли снять между вставкой и чтением; дата всё равно была занята
        holder_name = holder.user_name if holder and holder.user_name else ''
        logger.info(f"Дата {request.chat_id}/{request.date} уже занята: {holder_name}")
        return Conflict(date=request.date, existing_owner_name=holder_name)

    async def cancel(self, request: CancelRequest) -> CancelOutcome:
        """Снять бронь: Removed, Denied, Absent или Fault"""
        try:
            booking = self.ledger.find(request.chat_id, request.date)
            if booking is None:
                logger.info(f"Отмена {request.chat_id}/{request.date}: брони нет")
                return Absent(date=request.date)

            allowed = (
                is_owner(booking, request.user_id, request.user_name)
                or await self._is_admin(request)
            )
            if not allowed:
                logger.info(
                    f"Отмена {request.chat_id}/{request.date} запрещена для {request.user_id}"
                )
                return Denied(date=request.date)

            # Параллельная отмена могла успеть первой - это тоже успех
            removed = self.ledger.delete(request.chat_id, request.date)
        except StorageUnavailable as e:
            logger.error(f"Хранилище недоступно при отмене {request.chat_id}/{request.date}: {e}",
                         exc_info=True)
            return Fault(kind=STORAGE_UNAVAILABLE)

        logger.info(
            f"Бронь {request.chat_id}/{request.date} снята пользователем {request.user_id}"
            f"{'' if removed else ' (уже была удалена)'}"
        )
        return Removed(date=request.date)

    async def list(self, query: ListQuery) -> List[Booking]:
        """Брони чата по дате; StorageUnavailable пробрасывается"""
        return self.ledger.list(query.chat_id, query.since)

    async def _is_admin(self, request: CancelRequest) -> bool:
        if request.sender_is_chat:
            return True
        # Проверка best-effort: любой сбой означает "не админ"
        try:
            return await self.admin_checker.is_admin(request.chat_id, request.user_id)
        except Exception as e:
            logger.warning(
                f"Проверка прав {request.user_id} в чате {request.chat_id} не удалась: {e}",
                exc_info=True
            )
            return False
