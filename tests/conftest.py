import pytest

from config import Settings
from database.database import Database
from database.repository import BookingRepository
from services.arbitrator import ClaimArbitrator


class FakeAdminChecker:
    """Админы задаются множеством (chat_id, user_id); вызовы запоминаются"""

    def __init__(self, admins=()):
        self.admins = set(admins)
        self.calls = []

    async def is_admin(self, chat_id: str, user_id: int) -> bool:
        self.calls.append((chat_id, user_id))
        return (chat_id, user_id) in self.admins


@pytest.fixture
def settings(tmp_path) -> Settings:
    # Тесты не ходят в сеть и не используют настоящий токен
    return Settings(
        BOT_TOKEN="TEST_TOKEN",
        ADMIN_IDS=[100500],
        DB_PATH=str(tmp_path / "bookings.db"),
        ADMIN_CHECK_TIMEOUT_SECONDS=0.05,
    )


@pytest.fixture
def db(settings) -> Database:
    database = Database(settings.DB_PATH, timeout=settings.DB_TIMEOUT_SECONDS)
    database.init_db()
    return database


@pytest.fixture
def ledger(db) -> BookingRepository:
    return BookingRepository(db)


@pytest.fixture
def admin_checker() -> FakeAdminChecker:
    return FakeAdminChecker()


@pytest.fixture
def arbitrator(ledger, admin_checker) -> ClaimArbitrator:
    return ClaimArbitrator(ledger, admin_checker)
