import pytest

from rewardbin.models import Bin, Store, UserRole
from rewardbin.services.stores import filter_by_distance, haversine_km


class Point:
    def __init__(self, name, lat, lng):
        self.name = name
        self.lat = lat
        self.lng = lng


# Caller in central Chennai
CALLER = (13.0827, 80.2707)
NEAR = Point("Tambaram", 12.9249, 80.1000)
FAR = Point("Vellore", 12.9165, 79.1325)


def test_haversine_known_distance():
    # London to Paris
    assert haversine_km(51.5074, -0.1278, 48.8566, 2.3522) == pytest.approx(343.5, abs=1.0)


def test_haversine_same_point_is_zero():
    assert haversine_km(10.0, 20.0, 10.0, 20.0) == 0


def test_radius_between_two_distances_keeps_only_nearer_store():
    near_km = haversine_km(*CALLER, NEAR.lat, NEAR.lng)
    far_km = haversine_km(*CALLER, FAR.lat, FAR.lng)
    assert near_km < far_km

    matches = filter_by_distance([FAR, NEAR], *CALLER, radius=(near_km + far_km) / 2)

    assert [store.name for store, _ in matches] == ["Tambaram"]
    assert matches[0][1] == pytest.approx(near_km)


def test_distance_is_inclusive_at_radius():
    near_km = haversine_km(*CALLER, NEAR.lat, NEAR.lng)

    assert len(filter_by_distance([NEAR], *CALLER, radius=near_km)) == 1


@pytest.mark.parametrize(
    "lat,lng,radius",
    [(None, None, None), (13.0, None, 10.0), (None, 80.0, 10.0), (13.0, 80.0, None)],
)
def test_missing_filter_inputs_return_everything_without_distance(lat, lng, radius):
    matches = filter_by_distance([NEAR, FAR], lat, lng, radius)

    assert [(store.name, distance) for store, distance in matches] == [("Tambaram", None), ("Vellore", None)]


# HTTP surface

async def test_list_stores_with_distance(client, seed):
    await seed.store(lat=NEAR.lat, lng=NEAR.lng, name="Tambaram")
    await seed.store(lat=FAR.lat, lng=FAR.lng, name="Vellore")
    headers = await seed.auth_headers()

    response = await client.get(
        "/api/v1/stores",
        params={"lat": CALLER[0], "lng": CALLER[1], "radius": 50},
        headers=headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert [store["name"] for store in body["data"]] == ["Tambaram"]
    assert body["data"][0]["distance"] == pytest.approx(haversine_km(*CALLER, NEAR.lat, NEAR.lng))
    # Pagination counts the unfiltered page
    assert body["meta"]["total"] == 2


async def test_list_stores_without_coordinates(client, seed):
    await seed.store(name="Tambaram")
    headers = await seed.auth_headers()

    response = await client.get("/api/v1/stores", headers=headers)

    assert response.status_code == 200
    assert response.json()["data"][0]["distance"] is None
    assert response.json()["meta"] == {
        "total": 1,
        "currentPage": 1,
        "perPage": 20,
        "lastPage": 1,
        "prev": None,
        "next": None,
    }


async def test_store_crud_as_business_user(client, seed):
    headers = await seed.auth_headers(UserRole.BUSINESS_USER)
    payload = {
        "name": "Harbor Mart",
        "address1": "42 Harbor Road",
        "city": "Kochi",
        "state": "Kerala",
        "zip": "68200",
        "country": "India",
        "lat": 9.9312,
        "lng": 76.2673,
    }

    created = await client.post("/api/v1/stores", json=payload, headers=headers)
    assert created.status_code == 201
    store_id = created.json()["id"]

    updated = await client.patch(f"/api/v1/stores/{store_id}", json={"name": "Harbor Market"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["name"] == "Harbor Market"

    deleted = await client.delete(f"/api/v1/stores/{store_id}", headers=headers)
    assert deleted.status_code == 200
    assert await seed.count(Store) == 0


async def test_store_validation_errors(client, seed):
    headers = await seed.auth_headers(UserRole.ADMIN)

    response = await client.post(
        "/api/v1/stores",
        json={"name": "X", "address1": "1 A", "city": "Kochi", "state": "KL", "zip": "ab", "country": "IN",
              "lat": 100, "lng": 76.0},
        headers=headers,
    )

    assert response.status_code == 422
    details = response.json()["details"]
    assert {"name", "address1", "zip", "lat"} <= set(details)


async def test_store_with_bins_cannot_be_deleted(client, seed):
    store = await seed.store()
    await seed.bin(store=store)
    headers = await seed.auth_headers(UserRole.ADMIN)

    response = await client.delete(f"/api/v1/stores/{store.id}", headers=headers)

    assert response.status_code == 409
    assert await seed.count(Store) == 1
    assert await seed.count(Bin) == 1


async def test_patch_rejects_null_for_required_columns(client, seed):
    store = await seed.store()
    headers = await seed.auth_headers(UserRole.ADMIN)

    response = await client.patch(
        f"/api/v1/stores/{store.id}", json={"name": None, "lat": None}, headers=headers
    )

    assert response.status_code == 422
    assert response.json()["details"] == {
        "name": ["Value error, Field cannot be null"],
        "lat": ["Value error, Field cannot be null"],
    }

    # Optional columns can still be cleared
    cleared = await client.patch(f"/api/v1/stores/{store.id}", json={"description": None}, headers=headers)
    assert cleared.status_code == 200
    assert cleared.json()["description"] is None


async def test_stores_carry_organization_name(client, seed):
    organization = await seed.organization("Green Co")
    other = await seed.organization("Blue Co")
    store = await seed.store(organization=organization, name="Owned Store")
    await seed.store(name="Independent Store")
    headers = await seed.auth_headers(UserRole.ADMIN)

    listing = await client.get("/api/v1/stores", headers=headers)
    names = {item["name"]: item["organizationName"] for item in listing.json()["data"]}
    assert names == {"Owned Store": "Green Co", "Independent Store": None}

    detail = await client.get(f"/api/v1/stores/{store.id}", headers=headers)
    assert detail.json()["organizationName"] == "Green Co"

    moved = await client.patch(
        f"/api/v1/stores/{store.id}", json={"organizationId": str(other.id)}, headers=headers
    )
    assert moved.status_code == 200
    assert moved.json()["organizationName"] == "Blue Co"
