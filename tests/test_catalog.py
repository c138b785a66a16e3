import uuid

from rewardbin.models import Material, Member, Organization, RewardRule, UserRole


async def test_organization_lifecycle(client, seed):
    headers = await seed.auth_headers(UserRole.ADMIN)

    created = await client.post(
        "/api/v1/organizations",
        json={"name": "Blue Planet", "slug": "blue-planet", "metadata": '{"tier": "gold"}'},
        headers=headers,
    )
    assert created.status_code == 201
    assert created.json()["metadata"] == '{"tier": "gold"}'
    organization_id = created.json()["id"]

    duplicate = await client.post(
        "/api/v1/organizations", json={"name": "Copy", "slug": "blue-planet"}, headers=headers
    )
    assert duplicate.status_code == 409

    listing = await client.get("/api/v1/organizations", params={"search": "blue"}, headers=headers)
    assert listing.json()["meta"]["total"] == 1

    deleted = await client.delete(f"/api/v1/organizations/{organization_id}", headers=headers)
    assert deleted.status_code == 200
    assert await seed.count(Organization) == 0


async def test_organization_with_stores_cannot_be_deleted(client, seed):
    organization = await seed.organization()
    await seed.store(organization=organization)
    headers = await seed.auth_headers(UserRole.ADMIN)

    response = await client.delete(f"/api/v1/organizations/{organization.id}", headers=headers)

    assert response.status_code == 409
    assert response.json()["error"] == "Cannot delete organization: 1 stores still reference it"


async def test_members(client, seed):
    organization = await seed.organization()
    user = await seed.user(name="Member Person")
    headers = await seed.auth_headers(UserRole.ADMIN)
    path = f"/api/v1/organizations/{organization.id}/members"

    added = await client.post(path, json={"userId": str(user.id), "role": "admin"}, headers=headers)
    assert added.status_code == 201
    assert added.json()["user"]["name"] == "Member Person"
    member_id = added.json()["id"]

    again = await client.post(path, json={"userId": str(user.id)}, headers=headers)
    assert again.status_code == 409

    updated = await client.patch(f"{path}/{member_id}", json={"role": "owner"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["role"] == "owner"

    listing = await client.get(path, headers=headers)
    assert listing.json()["meta"]["total"] == 1

    removed = await client.delete(f"{path}/{member_id}", headers=headers)
    assert removed.status_code == 200
    assert await seed.count(Member) == 0


async def test_reward_rule_and_material_flow(client, seed):
    headers = await seed.auth_headers(UserRole.BUSINESS_USER)

    rule = await client.post(
        "/api/v1/reward-rules",
        json={"name": "Per can", "point": 3, "unit": 1, "unitType": "can"},
        headers=headers,
    )
    assert rule.status_code == 201
    rule_id = rule.json()["id"]

    material = await client.post(
        "/api/v1/materials", json={"name": "Aluminum", "rewardRuleId": rule_id}, headers=headers
    )
    assert material.status_code == 201
    assert material.json()["rewardRule"]["point"] == 3

    forbidden = await client.delete(f"/api/v1/reward-rules/{rule_id}", headers=headers)
    assert forbidden.status_code == 403

    # Rule still referenced by a material
    admin_headers = await seed.auth_headers(UserRole.ADMIN)
    blocked = await client.delete(f"/api/v1/reward-rules/{rule_id}", headers=admin_headers)
    assert blocked.status_code == 409
    assert blocked.json()["error"] == "Cannot delete reward rule: 1 materials still reference it"
    assert await seed.count(RewardRule) == 1

    removed = await client.delete(f"/api/v1/materials/{material.json()['id']}", headers=headers)
    assert removed.status_code == 200
    assert await seed.count(Material) == 0


async def test_reward_rule_bounds(client, seed):
    headers = await seed.auth_headers(UserRole.ADMIN)

    response = await client.post(
        "/api/v1/reward-rules",
        json={"name": "Broken", "point": 0, "unit": 0, "unitType": "kg"},
        headers=headers,
    )

    assert response.status_code == 422
    assert {"point", "unit"} <= set(response.json()["details"])


async def test_material_with_unknown_rule_is_404(client, seed):
    headers = await seed.auth_headers(UserRole.ADMIN)

    response = await client.post(
        "/api/v1/materials", json={"name": "Glass", "rewardRuleId": str(uuid.uuid4())}, headers=headers
    )

    assert response.status_code == 404


async def test_bin_crud_and_filters(client, seed):
    store = await seed.store()
    material = await seed.material(await seed.reward_rule())
    headers = await seed.auth_headers(UserRole.STORE_MANAGER)

    created = await client.post(
        "/api/v1/bins",
        json={
            "number": "B-7",
            "description": "Front entrance",
            "storeId": str(store.id),
            "materialId": str(material.id),
        },
        headers=headers,
    )
    assert created.status_code == 201
    bin_id = created.json()["id"]

    listing = await client.get("/api/v1/bins", params={"storeId": str(store.id)}, headers=headers)
    assert [item["id"] for item in listing.json()["data"]] == [bin_id]

    empty = await client.get("/api/v1/bins", params={"status": "INACTIVE"}, headers=headers)
    assert empty.json()["meta"]["total"] == 0

    deactivated = await client.patch(f"/api/v1/bins/{bin_id}", json={"status": "INACTIVE"}, headers=headers)
    assert deactivated.json()["status"] == "INACTIVE"

    user_headers = await seed.auth_headers()
    scan = await client.post("/api/v1/bins/scan", json={"binId": bin_id}, headers=user_headers)
    assert scan.status_code == 400


async def test_user_can_read_catalog_but_not_write(client, seed):
    await seed.store()
    headers = await seed.auth_headers()

    assert (await client.get("/api/v1/stores", headers=headers)).status_code == 200
    assert (await client.get("/api/v1/materials", headers=headers)).status_code == 200
    assert (await client.get("/api/v1/reward-rules", headers=headers)).status_code == 200
    payload = {"name": "Per can", "point": 3, "unit": 1, "unitType": "can"}
    assert (await client.post("/api/v1/reward-rules", json=payload, headers=headers)).status_code == 403


async def test_catalog_patches_reject_null_required_columns(client, seed):
    rule = await seed.reward_rule()
    material = await seed.material(rule)
    recycle_bin = await seed.bin(material=material)
    organization = await seed.organization()
    headers = await seed.auth_headers(UserRole.ADMIN)

    responses = [
        await client.patch(f"/api/v1/reward-rules/{rule.id}", json={"point": None}, headers=headers),
        await client.patch(f"/api/v1/materials/{material.id}", json={"rewardRuleId": None}, headers=headers),
        await client.patch(f"/api/v1/bins/{recycle_bin.id}", json={"storeId": None}, headers=headers),
        await client.patch(f"/api/v1/organizations/{organization.id}", json={"name": None}, headers=headers),
    ]

    assert [response.status_code for response in responses] == [422, 422, 422, 422]
    assert [list(response.json()["details"]) for response in responses] == [
        ["point"], ["rewardRuleId"], ["storeId"], ["name"],
    ]
