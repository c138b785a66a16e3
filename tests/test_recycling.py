from datetime import timedelta
import uuid

import pytest

from rewardbin.core.exceptions import InvalidStateException, NotFoundException
from rewardbin.models import RecordStatus, RecycleHistory, UserRole, UserTotalPoint
from rewardbin.services.recycling import RecyclingService, calculate_points
from rewardbin.utils.helpers import utcnow


class Rule:
    def __init__(self, point, unit):
        self.point = point
        self.unit = unit


@pytest.mark.parametrize(
    "total_count,point,unit,expected",
    [
        (1, 10, 1, 10),
        (3, 10, 1, 30),
        (3, 5, 2, 7),
        (1, 5, 2, 2),
        (1, 1, 4, 0),
    ],
)
def test_calculate_points_floors(total_count, point, unit, expected):
    assert calculate_points(total_count, Rule(point, unit)) == expected


def test_calculate_points_without_rule():
    assert calculate_points(5, None) == 0


async def test_record_credits_points(db, seed):
    user = await seed.user()
    recycle_bin = await seed.bin(material=await seed.material(await seed.reward_rule(point=10, unit=1)))

    history = await RecyclingService(db).record(user.id, recycle_bin.id, total_count=3)

    assert history.points == 30
    assert history.bin.material.name == "Plastic"
    assert await seed.balance(user) == 30


async def test_record_accumulates(db, seed):
    user = await seed.user()
    await seed.points(user, 5)
    recycle_bin = await seed.bin()
    service = RecyclingService(db)

    await service.record(user.id, recycle_bin.id)
    await service.record(user.id, recycle_bin.id)

    assert await seed.balance(user) == 25
    assert await seed.count(RecycleHistory, RecycleHistory.user_id == user.id) == 2


async def test_record_zero_point_event_skips_ledger(db, seed):
    user = await seed.user()
    recycle_bin = await seed.bin(material=await seed.material(await seed.reward_rule(point=1, unit=4)))

    history = await RecyclingService(db).record(user.id, recycle_bin.id, total_count=1)

    assert history.points == 0
    assert await seed.count(UserTotalPoint) == 0
    assert await seed.count(RecycleHistory) == 1


async def test_record_rejects_inactive_bin(db, seed):
    user = await seed.user()
    recycle_bin = await seed.bin(status=RecordStatus.INACTIVE)

    with pytest.raises(InvalidStateException):
        await RecyclingService(db).record(user.id, recycle_bin.id)

    assert await seed.count(RecycleHistory) == 0


async def test_record_unknown_bin(db, seed):
    user = await seed.user()

    with pytest.raises(NotFoundException):
        await RecyclingService(db).record(user.id, uuid.uuid4())


async def test_credit_failure_rolls_back_history(db, seed):
    user = await seed.user()
    recycle_bin = await seed.bin()
    service = RecyclingService(db)

    async def failing_credit(user_id, amount):
        raise RuntimeError("connection lost")

    service.ledger.credit = failing_credit

    with pytest.raises(RuntimeError):
        await service.record(user.id, recycle_bin.id)

    assert await seed.count(RecycleHistory) == 0
    assert await seed.balance(user) is None


# HTTP surface

async def test_recycle_endpoint_and_points(client, seed):
    user = await seed.user()
    recycle_bin = await seed.bin()
    headers = {"Authorization": f"Bearer {await seed.session_token(user)}"}

    response = await client.post(
        "/api/v1/recycle-histories",
        json={"binId": str(recycle_bin.id), "totalCount": 2},
        headers=headers,
    )

    assert response.status_code == 201
    assert response.json()["points"] == 20
    assert response.json()["bin"]["material"]["name"] == "Plastic"

    total = await client.get("/api/v1/points/total", headers=headers)
    assert total.status_code == 200
    assert total.json()["totalPoints"] == 20
    assert total.json()["email"] == user.email

    summary = await client.get("/api/v1/points", headers=headers)
    assert summary.json()["earnedPoints"] == 20
    assert summary.json()["spentPoints"] == 0

    listing = await client.get("/api/v1/recycle-histories", headers=headers)
    assert listing.json()["meta"]["total"] == 1


async def test_recycle_endpoint_validates_count(client, seed):
    recycle_bin = await seed.bin()
    headers = await seed.auth_headers()

    response = await client.post(
        "/api/v1/recycle-histories",
        json={"binId": str(recycle_bin.id), "totalCount": 0},
        headers=headers,
    )

    assert response.status_code == 422
    assert response.json()["error"] == "Validation Error"
    assert "totalCount" in response.json()["details"]


async def test_points_without_account(client, seed):
    headers = await seed.auth_headers()

    response = await client.get("/api/v1/points", headers=headers)

    assert response.status_code == 200
    assert response.json()["totalPoints"] == 0
    assert response.json()["updatedAt"] is None


async def test_user_recycle_histories_is_staff_only(client, seed):
    user = await seed.user()
    recycle_bin = await seed.bin()
    user_headers = {"Authorization": f"Bearer {await seed.session_token(user)}"}
    await client.post("/api/v1/recycle-histories", json={"binId": str(recycle_bin.id)}, headers=user_headers)

    forbidden = await client.get("/api/v1/user-recycle-histories", headers=user_headers)
    assert forbidden.status_code == 403

    manager_headers = await seed.auth_headers(UserRole.STORE_MANAGER)
    response = await client.get(
        "/api/v1/user-recycle-histories",
        params={"userId": str(user.id), "searchMaterial": "plast"},
        headers=manager_headers,
    )
    assert response.status_code == 200
    assert response.json()["meta"]["total"] == 1
    assert response.json()["data"][0]["user"]["id"] == str(user.id)
    assert response.json()["data"][0]["bin"]["store"]["city"] == "Chennai"


async def test_own_recycle_histories_filter_by_material_and_date(client, seed):
    user = await seed.user()
    plastic_bin = await seed.bin()
    glass = await seed.material(await seed.reward_rule(point=5), name="Glass")
    glass_bin = await seed.bin(material=glass)
    headers = {"Authorization": f"Bearer {await seed.session_token(user)}"}
    for recycle_bin in (plastic_bin, glass_bin):
        await client.post("/api/v1/recycle-histories", json={"binId": str(recycle_bin.id)}, headers=headers)
    now = utcnow()

    by_material = await client.get(
        "/api/v1/recycle-histories", params={"materialId": str(glass.id)}, headers=headers
    )
    assert [item["bin"]["material"]["name"] for item in by_material.json()["data"]] == ["Glass"]

    in_window = await client.get(
        "/api/v1/recycle-histories",
        params={
            "startDate": (now - timedelta(hours=1)).isoformat(),
            "endDate": (now + timedelta(hours=1)).isoformat(),
        },
        headers=headers,
    )
    assert in_window.json()["meta"]["total"] == 2

    later = await client.get(
        "/api/v1/recycle-histories",
        params={"startDate": (now + timedelta(hours=1)).isoformat()},
        headers=headers,
    )
    assert later.json()["meta"]["total"] == 0
