"""
Обработчики команд бронирования дат в группах
"""
import json
import logging

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import KeyboardButton, Message, ReplyKeyboardMarkup, WebAppInfo

from config import Settings
from database.database import StorageUnavailable
from services.arbitrator import ClaimArbitrator
from services.requests import (
    InvalidInput, cancel_request, claim_request, list_query, optional_int, parse_request
)
from utils.formatting import (
    FAULT_TEXT, full_name, render_booking_list, render_cancel_outcome, render_claim_outcome
)

logger = logging.getLogger(__name__)
router = Router()

HELP_TEXT = (
    "📅 Group date booking\n\n"
    "/book YYYY-MM-DD - book a date for yourself\n"
    "/cancel YYYY-MM-DD - cancel your booking (admins can cancel any)\n"
    "/list [YYYY-MM-DD] - booked dates, optionally starting from a date\n"
    "/open - calendar button (private chat)"
)


def _sent_by_chat(message: Message) -> bool:
    """Сообщение от имени самой группы - так пишет анонимный админ"""
    return message.sender_chat is not None and message.sender_chat.id == message.chat.id


@router.message(Command("start", "help"))
async def cmd_help(message: Message):
    """Команды /start и /help"""
    await message.answer(HELP_TEXT)


@router.message(Command("open"))
async def cmd_open(message: Message, settings: Settings):
    """Команда /open - кнопка календаря в личном чате"""
    if not settings.PAGES_URL:
        await message.answer("❗ Calendar is not configured.")
        return

    if message.chat.type != "private":
        await message.reply("📬 Open a private chat with the bot and send /open there.")
        return

    url = f"{settings.PAGES_URL}/index.html?chat_id={message.chat.id}"
    # sendData работает только из кнопки обычной клавиатуры
    keyboard = ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text="📅 Open Calendar", web_app=WebAppInfo(url=url))]],
        resize_keyboard=True
    )
    await message.answer("Open the calendar:", reply_markup=keyboard)


@router.message(Command("book"))
async def cmd_book(message: Message, command: CommandObject,
                   arbitrator: ClaimArbitrator, settings: Settings):
    """Команда /book <дата> - занять дату"""
    if not command.args:
        await message.reply("⚠️ Usage: /book YYYY-MM-DD")
        return

    user = message.from_user
    try:
        request = claim_request(
            message.chat.id,
            command.args.split()[0],
            user.id if user else None,
            full_name(user),
            message.message_thread_id,
            default_user_name=settings.DEFAULT_USER_NAME,
        )
    except InvalidInput as e:
        await message.reply(f"⚠️ Invalid {e.field}: {e.message}\nUsage: /book YYYY-MM-DD")
        return

    outcome = await arbitrator.claim(request)
    await message.reply(render_claim_outcome(outcome))


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, command: CommandObject, arbitrator: ClaimArbitrator):
    """Команда /cancel <дата> - снять бронь"""
    if not command.args:
        await message.reply("⚠️ Usage: /cancel YYYY-MM-DD")
        return

    user = message.from_user
    try:
        request = cancel_request(
            message.chat.id,
            command.args.split()[0],
            user.id if user else None,
            full_name(user),
            sender_is_chat=_sent_by_chat(message),
        )
    except InvalidInput as e:
        await message.reply(f"⚠️ Invalid {e.field}: {e.message}\nUsage: /cancel YYYY-MM-DD")
        return

    outcome = await arbitrator.cancel(request)
    await message.reply(render_cancel_outcome(outcome))


@router.message(Command("list"))
async def cmd_list(message: Message, command: CommandObject, arbitrator: ClaimArbitrator):
    """Команда /list [дата] - список броней чата"""
    since = command.args.split()[0] if command.args else None
    try:
        query = list_query(message.chat.id, since)
    except InvalidInput:
        await message.reply("⚠️ Usage: /list [YYYY-MM-DD]")
        return

    try:
        bookings = await arbitrator.list(query)
    except StorageUnavailable as e:
        logger.error(f"Не удалось получить список броней чата {query.chat_id}: {e}")
        await message.answer(FAULT_TEXT)
        return

    await message.answer(render_booking_list(bookings))


@router.message(F.web_app_data)
async def web_app_booking(message: Message, arbitrator: ClaimArbitrator, settings: Settings):
    """Данные из календаря (Telegram.WebApp.sendData)"""
    user = message.from_user
    try:
        payload = json.loads(message.web_app_data.data)
    except ValueError:
        logger.warning(f"Некорректный JSON из WebApp от {user.id if user else None}")
        return

    if not isinstance(payload, dict) or payload.get("type") != "book":
        return

    # Без валидного user_id/user_name в данных бронь записывается на отправителя
    uid = optional_int(payload.get("user_id"))
    if uid is None or uid <= 0:
        payload["user_id"] = user.id if user else None
    if not str(payload.get("user_name") or '').strip():
        payload["user_name"] = full_name(user)

    try:
        request = parse_request(payload, default_user_name=settings.DEFAULT_USER_NAME)
    except InvalidInput as e:
        logger.warning(f"Отклонены данные WebApp: {e}")
        await message.answer(f"⚠️ Invalid {e.field}: {e.message}")
        return

    outcome = await arbitrator.claim(request)
    await message.answer(render_claim_outcome(outcome))
