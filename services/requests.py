"""
Запросы к арбитру броней и их проверка на входе
"""
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from database.models import LEGACY_USER_ID
from utils.dates import normalize_date

_CHAT_ID_RE = re.compile(r'^-?\d+$')

# id в SQLite INTEGER: знаковое 64-битное
MAX_ID = 2 ** 63 - 1


class InvalidInput(ValueError):
    """Некорректное поле запроса"""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class ClaimRequest:
    """Заявка на дату"""
    chat_id: str
    date: str
    user_id: int
    user_name: str
    sub_thread_id: Optional[int] = None


@dataclass(frozen=True)
class CancelRequest:
    """Отмена брони"""
    chat_id: str
    date: str
    user_id: int
    user_name: Optional[str] = None
    # Сообщение отправлено от имени самого чата (анонимный админ)
    sender_is_chat: bool = False


@dataclass(frozen=True)
class ListQuery:
    """Список броней чата"""
    chat_id: str
    since: Optional[str] = None


Request = Union[ClaimRequest, CancelRequest, ListQuery]


def _chat_id(value: Any) -> str:
    if value is None or isinstance(value, bool):
        raise InvalidInput("chat_id", "required")
    text = str(value).strip()
    if not _CHAT_ID_RE.match(text):
        raise InvalidInput("chat_id", "must be integer")
    return str(int(text))


def _date(value: Any, field: str = "date") -> str:
    if value in (None, ""):
        raise InvalidInput(field, "required")
    try:
        return normalize_date(value)
    except ValueError:
        raise InvalidInput(field, "must be YYYY-MM-DD")


def optional_int(value: Any) -> Optional[int]:
    """Пробует привести значение к int, иначе None"""
    if value is None or isinstance(value, bool):  # bool - подтип int, исключаем
        return None
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not -MAX_ID <= number <= MAX_ID:
        return None
    return number


def _name(value: Any) -> str:
    return str(value).strip() if value is not None else ''


def claim_request(chat_id: Any, date: Any, user_id: Any = None,
                  user_name: Any = None, sub_thread_id: Any = None,
                  default_user_name: str = 'someone') -> ClaimRequest:
    """
    Сборка заявки из сырых значений.
    Отсутствующий или нечисловой user_id становится 0 (владелец неизвестен),
    пустое имя заменяется на default_user_name.
    """
    uid = optional_int(user_id)
    if uid is None or uid < 0:
        uid = LEGACY_USER_ID

    return ClaimRequest(
        chat_id=_chat_id(chat_id),
        date=_date(date),
        user_id=uid,
        user_name=_name(user_name) or default_user_name,
        sub_thread_id=optional_int(sub_thread_id),
    )


def cancel_request(chat_id: Any, date: Any, user_id: Any,
                   user_name: Any = None, sender_is_chat: bool = False) -> CancelRequest:
    """Сборка отмены; user_id обязателен и не может быть 0"""
    uid = optional_int(user_id)
    if uid is None:
        raise InvalidInput("user_id", "must be integer")
    if uid <= LEGACY_USER_ID:
        raise InvalidInput("user_id", "must be positive")

    return CancelRequest(
        chat_id=_chat_id(chat_id),
        date=_date(date),
        user_id=uid,
        user_name=_name(user_name) or None,
        sender_is_chat=bool(sender_is_chat),
    )


def list_query(chat_id: Any, since: Any = None) -> ListQuery:
    return ListQuery(
        chat_id=_chat_id(chat_id),
        since=_date(since, "since") if since not in (None, "") else None,
    )


def parse_request(payload: Dict[str, Any], default_user_name: str = 'someone') -> Request:
    """Разбор JSON от календаря по полю type: book / cancel / list"""
    if not isinstance(payload, dict):
        raise InvalidInput("payload", "must be object")

    kind = payload.get("type")
    if kind == "book":
        return claim_request(
            payload.get("chat_id"),
            payload.get("date"),
            payload.get("user_id"),
            payload.get("user_name"),
            payload.get("topic_id", payload.get("sub_thread_id")),
            default_user_name=default_user_name,
        )
    if kind == "cancel":
        return cancel_request(
            payload.get("chat_id"),
            payload.get("date"),
            payload.get("user_id"),
            payload.get("user_name"),
        )
    if kind == "list":
        return list_query(payload.get("chat_id"), payload.get("since"))

    raise InvalidInput("type", "must be one of: book, cancel, list")
