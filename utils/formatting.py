"""
Тексты ответов бота
"""
from typing import Iterable, Optional

from aiogram.types import User

from database.models import Booking
from services.outcomes import (
    Absent, Booked, CancelOutcome, ClaimOutcome, Conflict, Denied, Fault, Removed
)
from utils.dates import format_date

FAULT_TEXT = "❗ Bookings are temporarily unavailable. Please try again later."


def full_name(user: Optional[User]) -> str:
    """Имя пользователя для брони: имя и фамилия, @username или id"""
    if user is None:
        return 'someone'
    name = ' '.join(part for part in (user.first_name, user.last_name) if part).strip()
    if name:
        return name
    if user.username:
        return f"@{user.username}"
    return f"id{user.id}"


def render_booking_list(bookings: Iterable[Booking]) -> str:
    lines = [f"{b.date} — {b.user_name or 'someone'}" for b in bookings]
    if not lines:
        return "No bookings yet."
    return "📅 Booked days:\n" + "\n".join(lines)


def render_claim_outcome(outcome: ClaimOutcome) -> str:
    """Ответ на заявку"""
    if isinstance(outcome, Booked):
        return f"✅ {format_date(outcome.date)} booked for {outcome.owner_name}"
    if isinstance(outcome, Conflict):
        owner = outcome.existing_owner_name or 'someone else'
        return f"⛔ {format_date(outcome.date)} is already booked by {owner}"
    if isinstance(outcome, Fault):
        return FAULT_TEXT
    raise TypeError(f"Неизвестный итог заявки: {outcome!r}")


def render_cancel_outcome(outcome: CancelOutcome) -> str:
    """Ответ на отмену"""
    if isinstance(outcome, Removed):
        return f"🗑 Booking for {format_date(outcome.date)} cancelled"
    if isinstance(outcome, Denied):
        return f"⚠️ Only the owner or a chat admin can cancel {format_date(outcome.date)}"
    if isinstance(outcome, Absent):
        return f"ℹ️ {format_date(outcome.date)} is not booked"
    if isinstance(outcome, Fault):
        return FAULT_TEXT
    raise TypeError(f"Неизвестный итог отмены: {outcome!r}")
