import uuid

import pytest

from rewardbin.core.exceptions import InvalidStateException, NotFoundException
from rewardbin.models import RecordStatus, RecycleHistory, UserTotalPoint
from rewardbin.services.bin_scan import BinScanService, build_instruction


async def test_scan_describes_bin(db, seed):
    organization = await seed.organization()
    store = await seed.store(organization=organization)
    material = await seed.material(await seed.reward_rule(point=5, unit=2, unit_type="kg"), name="Aluminum")
    recycle_bin = await seed.bin(store=store, material=material)

    result = await BinScanService(db).scan(recycle_bin.id)

    assert result.bin.id == recycle_bin.id
    assert result.material.name == "Aluminum"
    assert result.store.organization.name == "Green Co"
    assert result.reward_rule.point == 5
    assert result.instruction == (
        "You are about to recycle Aluminum at Main Street Store. You will earn 5 points per 2 kg."
    )


async def test_scan_unknown_bin(db):
    with pytest.raises(NotFoundException):
        await BinScanService(db).scan(uuid.uuid4())


async def test_scan_inactive_bin(db, seed):
    recycle_bin = await seed.bin(status=RecordStatus.INACTIVE)

    with pytest.raises(InvalidStateException) as exc_info:
        await BinScanService(db).scan(recycle_bin.id)

    assert exc_info.value.detail == "Bin is not active"


async def test_scan_bin_in_inactive_store(db, seed):
    store = await seed.store(status=RecordStatus.INACTIVE)
    recycle_bin = await seed.bin(store=store)

    with pytest.raises(InvalidStateException) as exc_info:
        await BinScanService(db).scan(recycle_bin.id)

    assert exc_info.value.detail == "Store is not active"


def test_instruction_without_reward_rule():
    class Named:
        def __init__(self, name):
            self.name = name

    assert build_instruction(Named("Glass"), Named("Corner Shop"), None) == (
        "You are about to recycle Glass at Corner Shop. No points available for this material."
    )


async def test_repeated_scan_is_identical_and_writes_nothing(client, seed):
    recycle_bin = await seed.bin()
    headers = await seed.auth_headers()

    first = await client.post("/api/v1/bins/scan", json={"binId": str(recycle_bin.id)}, headers=headers)
    second = await client.post("/api/v1/bins/scan", json={"binId": str(recycle_bin.id)}, headers=headers)

    assert first.status_code == 200
    assert first.json() == second.json()
    assert first.json()["message"] == "Bin scanned successfully"
    assert first.json()["data"]["rewardRule"]["point"] == 10
    assert await seed.count(RecycleHistory) == 0
    assert await seed.count(UserTotalPoint) == 0


async def test_scan_requires_session(client, seed):
    recycle_bin = await seed.bin()

    response = await client.post("/api/v1/bins/scan", json={"binId": str(recycle_bin.id)})

    assert response.status_code == 401


async def test_scan_inactive_bin_is_400(client, seed):
    recycle_bin = await seed.bin(status=RecordStatus.INACTIVE)
    headers = await seed.auth_headers()

    response = await client.post("/api/v1/bins/scan", json={"binId": str(recycle_bin.id)}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {"error": "Bin is not active"}


async def test_scan_unknown_bin_is_404(client, seed):
    headers = await seed.auth_headers()

    response = await client.post("/api/v1/bins/scan", json={"binId": str(uuid.uuid4())}, headers=headers)

    assert response.status_code == 404
    assert response.json() == {"error": "Bin not found"}
