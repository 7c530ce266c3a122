import pytest

from tactjam.db import schema


@pytest.mark.asyncio
async def test_resolve_and_lookup(async_client, auth_headers):
    payload = {"positions": [{"x": 1, "y": 2, "z": 3}, {"x": 4, "y": 5, "z": 6}]}

    response = await async_client.post("/api/motor-positions", json=payload, headers=auth_headers)
    assert response.status_code == 201
    created = response.json()
    assert created["positions"] == [{"x": 1.0, "y": 2.0, "z": 3.0}, {"x": 4.0, "y": 5.0, "z": 6.0}]

    response = await async_client.post(
        "/api/motor-positions", json={"xs": [1, 4], "ys": [2, 5], "zs": [3, 6]}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["id"] == created["id"]

    response = await async_client.get("/api/motor-positions", params={"x": "1,4", "y": "2,5", "z": "3,6"})
    assert [row["id"] for row in response.json()] == [created["id"]]

    response = await async_client.get(f"/api/motor-positions/{created['id']}")
    assert response.json() == created


@pytest.mark.asyncio
async def test_lookup_never_creates(async_client):
    response = await async_client.get("/api/motor-positions", params={"x": "9", "y": "9", "z": "9"})
    assert response.status_code == 200
    assert response.json() == []

    response = await async_client.get("/api/motor-positions", params={"x": "9", "y": "9"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_invalid_sets(async_client, auth_headers):
    response = await async_client.post(
        "/api/motor-positions", json={"xs": [1, 2], "ys": [1], "zs": [1, 2]}, headers=auth_headers
    )
    assert response.status_code == 400

    response = await async_client.post("/api/motor-positions", json={}, headers=auth_headers)
    assert response.status_code == 400

    response = await async_client.get("/api/motor-positions/missing")
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"xs": [True], "ys": [1], "zs": [1]},
    {"xs": [1], "ys": ["2"], "zs": [1]},
    {"positions": [{"x": True, "y": 1, "z": 1}]},
    {"positions": [{"x": 1, "y": "2", "z": 1}]},
])
async def test_non_numeric_coordinates_are_rejected(async_client, auth_headers, store, payload):
    response = await async_client.post("/api/motor-positions", json=payload, headers=auth_headers)
    assert response.status_code == 400
    assert await store.find(schema.POSITION_SETS) == []
