from datetime import timedelta

import pytest

from rewardbin.models import Member, UserRole
from rewardbin.services.recycling import RecyclingService
from rewardbin.services.redemption import RedemptionService
from rewardbin.utils.helpers import utcnow


@pytest.fixture
async def activity(db, seed):
    """Two organizations, three bins, two recyclers and one redemption"""
    green = await seed.organization("Green Co")
    blue = await seed.organization("Blue Co")
    green_store = await seed.store(organization=green, name="Green Store")
    blue_store = await seed.store(organization=blue, name="Blue Store")
    plastic = await seed.material(await seed.reward_rule(point=10), name="Plastic")
    glass = await seed.material(await seed.reward_rule(point=5), name="Glass")
    plastic_bin = await seed.bin(store=green_store, material=plastic)
    glass_bin = await seed.bin(store=green_store, material=glass)
    blue_bin = await seed.bin(store=blue_store, material=plastic)

    alice = await seed.user(name="Alice")
    bob = await seed.user(name="Bob")
    await seed.add(Member(organization_id=green.id, user_id=alice.id))

    recycling = RecyclingService(db)
    await recycling.record(alice.id, plastic_bin.id, total_count=3)
    await recycling.record(alice.id, glass_bin.id, total_count=2)
    await recycling.record(bob.id, blue_bin.id, total_count=1)

    coupon = await seed.coupon(points_to_redeem=20, organization=green)
    await RedemptionService(db).redeem(alice.id, coupon.id)

    return {"green": green, "alice": alice, "bob": bob}


async def test_report_across_all_organizations(client, seed, activity):
    headers = await seed.auth_headers(UserRole.ADMIN)

    response = await client.get("/api/v1/analytics", headers=headers)

    assert response.status_code == 200
    report = response.json()["data"]
    assert [(row["organizationName"], row["userCount"]) for row in report["usersByOrganization"]] == [
        ("Green Co", 1)
    ]
    assert [(row["organizationName"], row["storeCount"]) for row in report["storesByOrganization"]] == [
        ("Blue Co", 1),
        ("Green Co", 1),
    ]
    assert len(report["binsByStore"]) == 3
    assert [
        (row["materialName"], row["recycleCount"], row["totalPoints"])
        for row in report["recyclingActivityByMaterial"]
    ] == [("Plastic", 4, 40), ("Glass", 2, 10)]

    engagement = report["userEngagement"]
    assert [(row["userName"], row["recycleCount"], row["totalPoints"]) for row in engagement] == [
        ("Alice", 5, 40),
        ("Bob", 1, 10),
    ]
    assert engagement[0]["activeDays"] == 1
    assert engagement[0]["lastActivity"]

    assert report["pointsAndRewards"] == {
        "totalPointsEarned": 50,
        "totalRecyclingCount": 6,
        "totalPointsRedeemed": 20,
        "redeemedPointsPercent": 40,
        "availableCoupons": 1,
    }


async def test_report_scoped_to_one_organization(client, seed, activity):
    headers = await seed.auth_headers(UserRole.ADMIN)

    response = await client.get(
        "/api/v1/analytics", params={"organizationId": str(activity["green"].id)}, headers=headers
    )

    report = response.json()["data"]
    assert [row["organizationName"] for row in report["storesByOrganization"]] == ["Green Co"]
    assert {row["storeName"] for row in report["binsByStore"]} == {"Green Store"}
    assert [
        (row["materialName"], row["recycleCount"], row["totalPoints"])
        for row in report["recyclingActivityByMaterial"]
    ] == [("Plastic", 3, 30), ("Glass", 2, 10)]
    # Only members of the organization count towards engagement
    assert [row["userId"] for row in report["userEngagement"]] == [str(activity["alice"].id)]
    assert report["pointsAndRewards"]["totalPointsEarned"] == 40
    assert report["pointsAndRewards"]["redeemedPointsPercent"] == 50


async def test_report_window_excludes_activity_outside_it(client, seed, activity):
    headers = await seed.auth_headers(UserRole.ADMIN)
    tomorrow = utcnow() + timedelta(days=1)

    response = await client.get(
        "/api/v1/analytics", params={"startDate": tomorrow.isoformat()}, headers=headers
    )

    report = response.json()["data"]
    assert report["recyclingActivityByMaterial"] == []
    assert report["userEngagement"] == []
    assert report["pointsAndRewards"]["totalPointsEarned"] == 0
    assert report["pointsAndRewards"]["redeemedPointsPercent"] == 0
    # Catalog breakdowns ignore the window
    assert len(report["binsByStore"]) == 3


async def test_report_rejects_inverted_window(client, seed):
    headers = await seed.auth_headers(UserRole.ADMIN)
    now = utcnow()

    response = await client.get(
        "/api/v1/analytics",
        params={"startDate": now.isoformat(), "endDate": (now - timedelta(days=1)).isoformat()},
        headers=headers,
    )

    assert response.status_code == 422
    assert response.json()["details"] == {"endDate": ["End date must be after start date"]}


async def test_report_is_admin_only(client, seed):
    headers = await seed.auth_headers(UserRole.BUSINESS_USER)

    response = await client.get("/api/v1/analytics", headers=headers)

    assert response.status_code == 403
