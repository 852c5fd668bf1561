import asyncio
from unittest.mock import MagicMock

import pytest

from database.database import StorageUnavailable
from database.models import Booking
from database.repository import BookingRepository
from services.arbitrator import ClaimArbitrator, is_owner
from services.outcomes import (
    STORAGE_UNAVAILABLE, Absent, Booked, Conflict, Denied, Fault, Removed
)
from services.requests import ClaimRequest, ListQuery, cancel_request, claim_request

from conftest import FakeAdminChecker

CHAT = "-1001"
DATE = "2025-06-01"


async def test_booking_scenario(arbitrator: ClaimArbitrator) -> None:
    assert await arbitrator.claim(claim_request(CHAT, DATE, 42, "Bob")) == Booked(DATE, "Bob")
    assert await arbitrator.claim(claim_request(CHAT, DATE, 7, "Eve")) == Conflict(DATE, "Bob")
    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 7, "Eve")) == Denied(DATE)
    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 42, "Bob")) == Removed(DATE)
    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 42, "Bob")) == Absent(DATE)


async def test_concurrent_claims_yield_one_booked_one_conflict(arbitrator: ClaimArbitrator) -> None:
    results = await asyncio.gather(
        arbitrator.claim(claim_request(CHAT, DATE, 1, "Ann")),
        arbitrator.claim(claim_request(CHAT, DATE, 2, "Ben")),
    )

    assert sum(isinstance(r, Booked) for r in results) == 1
    assert sum(isinstance(r, Conflict) for r in results) == 1


async def test_owner_can_cancel_after_rename(arbitrator: ClaimArbitrator) -> None:
    await arbitrator.claim(claim_request(CHAT, DATE, 42, "Bob"))

    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 42, "Robert")) == Removed(DATE)


async def test_owner_does_not_need_admin_check(arbitrator: ClaimArbitrator,
                                               admin_checker: FakeAdminChecker) -> None:
    await arbitrator.claim(claim_request(CHAT, DATE, 42, "Bob"))
    await arbitrator.cancel(cancel_request(CHAT, DATE, 42, "Bob"))

    assert admin_checker.calls == []


async def test_legacy_booking_cancelled_by_name_match(arbitrator: ClaimArbitrator,
                                                      ledger: BookingRepository) -> None:
    ledger.try_insert(CHAT, DATE, 0, "Alice")

    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 999, "  alice ")) == Removed(DATE)
    assert ledger.find(CHAT, DATE) is None


async def test_legacy_booking_not_cancelled_by_other_name(arbitrator: ClaimArbitrator,
                                                          ledger: BookingRepository) -> None:
    ledger.try_insert(CHAT, DATE, 0, "Alice")

    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 999, "Bob")) == Denied(DATE)
    assert ledger.find(CHAT, DATE) is not None


async def test_legacy_booking_cancelled_by_admin(ledger: BookingRepository) -> None:
    arbitrator = ClaimArbitrator(ledger, FakeAdminChecker({(CHAT, 999)}))
    ledger.try_insert(CHAT, DATE, 0, "Alice")

    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 999, "Bob")) == Removed(DATE)


async def test_admin_override(ledger: BookingRepository) -> None:
    checker = FakeAdminChecker({(CHAT, 5)})
    arbitrator = ClaimArbitrator(ledger, checker)
    await arbitrator.claim(claim_request(CHAT, DATE, 42, "Bob"))

    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 5, "Mod")) == Removed(DATE)
    assert checker.calls == [(CHAT, 5)]


async def test_admin_of_other_chat_is_denied(ledger: BookingRepository) -> None:
    arbitrator = ClaimArbitrator(ledger, FakeAdminChecker({("-2002", 5)}))
    await arbitrator.claim(claim_request(CHAT, DATE, 42, "Bob"))

    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 5, "Mod")) == Denied(DATE)


async def test_anonymous_admin_skips_admin_check(arbitrator: ClaimArbitrator,
                                                 admin_checker: FakeAdminChecker) -> None:
    await arbitrator.claim(claim_request(CHAT, DATE, 42, "Bob"))

    outcome = await arbitrator.cancel(
        cancel_request(CHAT, DATE, 1087968824, "Group", sender_is_chat=True)
    )

    assert outcome == Removed(DATE)
    assert admin_checker.calls == []


async def test_cancel_race_is_still_removed(admin_checker: FakeAdminChecker) -> None:
    ledger = MagicMock(spec=BookingRepository)
    ledger.find.return_value = Booking(CHAT, DATE, 42, "Bob")
    ledger.delete.return_value = False
    arbitrator = ClaimArbitrator(ledger, admin_checker)

    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 42, "Bob")) == Removed(DATE)


async def test_conflict_when_holder_vanished(admin_checker: FakeAdminChecker) -> None:
    ledger = MagicMock(spec=BookingRepository)
    ledger.try_insert.return_value = False
    ledger.find.return_value = None
    arbitrator = ClaimArbitrator(ledger, admin_checker)

    assert await arbitrator.claim(claim_request(CHAT, DATE, 1, "Ann")) == Conflict(DATE, "")


@pytest.mark.parametrize("method", ["try_insert", "find"])
async def test_claim_storage_fault(admin_checker: FakeAdminChecker, method: str) -> None:
    ledger = MagicMock(spec=BookingRepository)
    ledger.try_insert.return_value = False
    getattr(ledger, method).side_effect = StorageUnavailable("disk I/O error")
    arbitrator = ClaimArbitrator(ledger, admin_checker)

    assert await arbitrator.claim(claim_request(CHAT, DATE, 1, "Ann")) == Fault(STORAGE_UNAVAILABLE)


@pytest.mark.parametrize("method", ["find", "delete"])
async def test_cancel_storage_fault(admin_checker: FakeAdminChecker, method: str) -> None:
    ledger = MagicMock(spec=BookingRepository)
    ledger.find.return_value = Booking(CHAT, DATE, 42, "Bob")
    getattr(ledger, method).side_effect = StorageUnavailable("database is locked")
    arbitrator = ClaimArbitrator(ledger, admin_checker)

    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 42, "Bob")) == Fault(STORAGE_UNAVAILABLE)


async def test_list_ordered_and_filtered(arbitrator: ClaimArbitrator) -> None:
    for date in ("2025-03-05", "2025-01-01", "2025-02-15"):
        await arbitrator.claim(ClaimRequest(CHAT, date, 1, "A"))

    assert [b.date for b in await arbitrator.list(ListQuery(CHAT))] == [
        "2025-01-01", "2025-02-15", "2025-03-05"
    ]
    assert [b.date for b in await arbitrator.list(ListQuery(CHAT, since="2025-02-01"))] == [
        "2025-02-15", "2025-03-05"
    ]


async def test_list_storage_fault_propagates(admin_checker: FakeAdminChecker) -> None:
    ledger = MagicMock(spec=BookingRepository)
    ledger.list.side_effect = StorageUnavailable("unable to open database file")
    arbitrator = ClaimArbitrator(ledger, admin_checker)

    with pytest.raises(StorageUnavailable):
        await arbitrator.list(ListQuery(CHAT))


def test_is_owner_rules() -> None:
    assert is_owner(Booking(CHAT, DATE, 42, "Bob"), 42, None)
    assert not is_owner(Booking(CHAT, DATE, 42, "Bob"), 7, "Bob")
    assert is_owner(Booking(CHAT, DATE, 0, "Alice"), 7, "ALICE")
    assert not is_owner(Booking(CHAT, DATE, 0, ""), 7, "")
    assert not is_owner(Booking(CHAT, DATE, 0, None), 7, None)


class BrokenAdminChecker:
    async def is_admin(self, chat_id: str, user_id: int) -> bool:
        raise RuntimeError("collaborator unreachable")


async def test_failing_admin_check_means_denied(ledger: BookingRepository) -> None:
    arbitrator = ClaimArbitrator(ledger, BrokenAdminChecker())
    await arbitrator.claim(claim_request(CHAT, DATE, 42, "Bob"))

    assert await arbitrator.cancel(cancel_request(CHAT, DATE, 7, "Eve")) == Denied(DATE)
    assert ledger.find(CHAT, DATE) is not None


async def test_oversized_user_id_claims_as_unknown_owner(arbitrator: ClaimArbitrator,
                                                         ledger: BookingRepository) -> None:
    outcome = await arbitrator.claim(claim_request(CHAT, DATE, "99999999999999999999", "Ann"))

    assert outcome == Booked(DATE, "Ann")
    assert ledger.find(CHAT, DATE).user_id == 0
