import asyncio

import pytest

from rewardbin.core.exceptions import BadRequestException, InsufficientPointsException
from rewardbin.models import UserTotalPoint
from rewardbin.services.points_ledger import PointsLedger


async def test_credit_creates_account_on_first_use(db, seed):
    user = await seed.user()
    ledger = PointsLedger(db)

    assert await ledger.get_account(user.id) is None
    assert await ledger.credit(user.id, 25) == 25
    await db.commit()

    assert await seed.balance(user) == 25
    assert await seed.count(UserTotalPoint, UserTotalPoint.user_id == user.id) == 1


async def test_credit_accumulates_on_existing_account(db, seed):
    user = await seed.user()
    await seed.points(user, 40)
    ledger = PointsLedger(db)

    assert await ledger.credit(user.id, 10) == 50
    assert await ledger.credit(user.id, 5) == 55
    await db.commit()

    assert await seed.balance(user) == 55
    assert await seed.count(UserTotalPoint, UserTotalPoint.user_id == user.id) == 1


async def test_debit_reduces_balance(db, seed):
    user = await seed.user()
    await seed.points(user, 100)

    assert await PointsLedger(db).debit(user.id, 30) == 70
    await db.commit()

    assert await seed.balance(user) == 70


async def test_debit_down_to_exactly_zero(db, seed):
    user = await seed.user()
    await seed.points(user, 30)

    assert await PointsLedger(db).debit(user.id, 30) == 0


async def test_debit_over_balance_is_rejected_and_balance_unchanged(db, seed):
    user = await seed.user()
    await seed.points(user, 20)

    with pytest.raises(InsufficientPointsException) as exc_info:
        await PointsLedger(db).debit(user.id, 50)
    await db.commit()

    assert exc_info.value.shortfall == 30
    assert exc_info.value.details == {"required": 50, "available": 20, "shortfall": 30}
    assert await seed.balance(user) == 20


async def test_debit_without_account_is_rejected(db, seed):
    user = await seed.user()

    with pytest.raises(InsufficientPointsException) as exc_info:
        await PointsLedger(db).debit(user.id, 1)

    assert exc_info.value.available == 0
    assert exc_info.value.detail == "You have no points to redeem"
    assert await PointsLedger(db).get_account(user.id) is None


async def test_balance_never_negative_over_mixed_sequence(db, seed):
    user = await seed.user()
    ledger = PointsLedger(db)
    operations = [("credit", 10), ("debit", 4), ("debit", 7), ("credit", 3), ("debit", 9), ("debit", 1)]

    for kind, amount in operations:
        before = await ledger.get_balance(user.id)
        if kind == "credit":
            await ledger.credit(user.id, amount)
            continue
        try:
            await ledger.debit(user.id, amount)
        except InsufficientPointsException:
            assert await ledger.get_balance(user.id) == before
        assert await ledger.get_balance(user.id) >= 0

    # 10 - 4 = 6, 7 rejected, + 3 = 9, - 9 = 0, 1 rejected
    assert await ledger.get_balance(user.id) == 0


@pytest.mark.parametrize("amount", [0, -5])
async def test_non_positive_amounts_are_rejected(db, seed, amount):
    user = await seed.user()
    ledger = PointsLedger(db)

    with pytest.raises(BadRequestException):
        await ledger.credit(user.id, amount)
    with pytest.raises(BadRequestException):
        await ledger.debit(user.id, amount)


async def test_get_account_sees_fresh_balance_after_debit(db, seed):
    user = await seed.user()
    await seed.points(user, 10)
    ledger = PointsLedger(db)

    account = await ledger.get_account(user.id)
    assert account.total_points == 10

    await ledger.debit(user.id, 4)
    assert (await ledger.get_account(user.id)).total_points == 6


async def _credit_in_own_session(database, user_id, amount):
    async with database.session_factory() as session:
        total = await PointsLedger(session).credit(user_id, amount)
        await session.commit()
        return total


async def test_parallel_credits_all_land(database, seed):
    user = await seed.user()

    totals = await asyncio.gather(*(_credit_in_own_session(database, user.id, 10) for _ in range(5)))

    assert sorted(totals) == [10, 20, 30, 40, 50]
    assert await seed.balance(user) == 50
    assert await seed.count(UserTotalPoint, UserTotalPoint.user_id == user.id) == 1


async def _debit_in_own_session(database, user_id, amount):
    async with database.session_factory() as session:
        remaining = await PointsLedger(session).debit(user_id, amount)
        await session.commit()
        return remaining


async def test_parallel_debits_never_overdraw(database, seed):
    user = await seed.user()
    await seed.points(user, 150)

    results = await asyncio.gather(
        *(_debit_in_own_session(database, user.id, 100) for _ in range(4)),
        return_exceptions=True,
    )

    assert results.count(50) == 1
    assert all(isinstance(result, InsufficientPointsException) for result in results if result != 50)
    assert await seed.balance(user) == 50
