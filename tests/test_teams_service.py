import pytest

from tactjam.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from tactjam.db import schema


@pytest.mark.asyncio
async def test_create_and_find(store, team_service, alice):
    team = await team_service.create(" crew ", alice)
    assert team["name"] == "crew"
    assert team["creator_id"] == alice.id

    assert (await team_service.get(team["id"]))["name"] == "crew"
    assert (await team_service.get_by_name("crew"))["id"] == team["id"]
    assert [row["id"] for row in await team_service.list()] == [team["id"]]

    with pytest.raises(NotFoundError):
        await team_service.get("missing")
    with pytest.raises(NotFoundError):
        await team_service.get_by_name("nobody")


@pytest.mark.asyncio
async def test_taken_name_is_a_conflict(store, team_service, alice, bob):
    await team_service.create("crew", alice)

    with pytest.raises(ConflictError) as exc_info:
        await team_service.create("crew", bob)
    assert exc_info.value.message == "Name already taken"
    assert len(await store.find(schema.TEAMS)) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["a", "has space", "dash-ed", "x" * 129, None, 42])
async def test_invalid_names_write_nothing(store, team_service, alice, name):
    with pytest.raises(ValidationError):
        await team_service.create(name, alice)
    assert await store.find(schema.TEAMS) == []


@pytest.mark.asyncio
async def test_create_requires_a_user(store, team_service):
    with pytest.raises(PermissionDeniedError):
        await team_service.create("crew", None)


@pytest.mark.asyncio
async def test_rename_is_creator_or_admin(store, team_service, alice, bob, admin):
    team = await team_service.create("crew", alice)
    await team_service.create("taken", bob)

    with pytest.raises(PermissionDeniedError):
        await team_service.rename(team["id"], "mine", bob)
    with pytest.raises(ConflictError):
        await team_service.rename(team["id"], "taken", alice)

    renamed = await team_service.rename(team["id"], "squad", alice)
    assert renamed["name"] == "squad"
    renamed = await team_service.rename(team["id"], "band", admin)
    assert renamed["name"] == "band"


@pytest.mark.asyncio
async def test_delete_clears_members(store, team_service, alice, bob):
    team = await team_service.create("crew", alice)
    member = await store.insert(schema.USERS, {"username": "m", "email": "m@example.com", "team_id": team["id"]})

    with pytest.raises(PermissionDeniedError):
        await team_service.delete(team["id"], bob)

    await team_service.delete(team["id"], alice)
    assert await store.find(schema.TEAMS) == []
    assert (await store.find(schema.USERS, {"id": member["id"]}))[0]["team_id"] is None

    # absent teams are a no-op
    await team_service.delete(team["id"], alice)
