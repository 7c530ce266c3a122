import asyncio

import pytest

from tactjam.core.exceptions import ConflictError
from tactjam.db import schema


@pytest.mark.asyncio
async def test_insert_assigns_id_and_copies(store):
    row = await store.insert(schema.TAGS, {"name": "fun", "creator_id": "u1"})
    assert row["id"]

    row["name"] = "changed"
    stored = await store.find(schema.TAGS, {"id": row["id"]})
    assert stored[0]["name"] == "fun"


@pytest.mark.asyncio
async def test_unique_keys_are_enforced(store):
    await store.insert(schema.TAGS, {"name": "fun"})
    with pytest.raises(ConflictError):
        await store.insert(schema.TAGS, {"name": "fun"})

    # body tags have their own namespace
    await store.insert(schema.BODY_TAGS, {"name": "fun"})


@pytest.mark.asyncio
async def test_compound_unique_key(store):
    await store.insert(schema.TACTON_TAG_LINKS, {"tacton_id": "t1", "tag_id": "a"})
    await store.insert(schema.TACTON_TAG_LINKS, {"tacton_id": "t1", "tag_id": "b"})
    with pytest.raises(ConflictError):
        await store.insert(schema.TACTON_TAG_LINKS, {"tacton_id": "t1", "tag_id": "a"})


@pytest.mark.asyncio
async def test_filters(store):
    for name in ("aa", "bb", "cc"):
        await store.insert(schema.TAGS, {"name": name, "creator_id": "u1"})

    assert len(await store.find(schema.TAGS)) == 3
    assert len(await store.find(schema.TAGS, {"name": {"$in": ["aa", "cc", "zz"]}})) == 2
    assert await store.find(schema.TAGS, {"name": "aa", "creator_id": "u2"}) == []

    with pytest.raises(ValueError):
        await store.find(schema.TAGS, {"name": {"$regex": "a"}})


@pytest.mark.asyncio
async def test_find_unique(store):
    await store.insert(schema.POSITION_SETS, {"xs": [], "ys": [], "zs": [], "fingerprint": "a"})
    await store.insert(schema.TACTONS, {"title": "One", "owner_id": "u1"})
    await store.insert(schema.TACTONS, {"title": "Two", "owner_id": "u1"})

    assert await store.find_unique(schema.POSITION_SETS, {"fingerprint": "a"}) is not None
    assert await store.find_unique(schema.POSITION_SETS, {"fingerprint": "b"}) is None
    # ambiguous counts as not found
    assert await store.find_unique(schema.TACTONS, {"owner_id": "u1"}) is None


@pytest.mark.asyncio
async def test_update_checks_unique_and_rejects_id_change(store):
    first = await store.insert(schema.TAGS, {"name": "aa"})
    await store.insert(schema.TAGS, {"name": "bb"})

    with pytest.raises(ConflictError):
        await store.update(schema.TAGS, {"id": first["id"]}, {"name": "bb"})
    with pytest.raises(ValueError):
        await store.update(schema.TAGS, {"id": first["id"]}, {"id": "other"})

    updated = await store.update(schema.TAGS, {"id": first["id"]}, {"name": "cc"})
    assert [row["name"] for row in updated] == ["cc"]


@pytest.mark.asyncio
async def test_delete_cascades_to_links(store):
    tacton = await store.insert(schema.TACTONS, {"title": "One"})
    tag = await store.insert(schema.TAGS, {"name": "fun"})
    await store.insert(schema.TACTON_TAG_LINKS, {"tacton_id": tacton["id"], "tag_id": tag["id"]})
    await store.insert(schema.TACTON_BODYTAG_LINKS, {"tacton_id": tacton["id"], "bodytag_id": "b1"})

    assert await store.delete(schema.TACTONS, {"id": tacton["id"]}) == 1
    assert await store.find(schema.TACTON_TAG_LINKS) == []
    assert await store.find(schema.TACTON_BODYTAG_LINKS) == []
    # the tag itself survives
    assert len(await store.find(schema.TAGS)) == 1


@pytest.mark.asyncio
async def test_concurrent_inserts_of_same_key(store):
    results = await asyncio.gather(
        store.insert(schema.TAGS, {"name": "race"}),
        store.insert(schema.TAGS, {"name": "race"}),
        return_exceptions=True,
    )
    assert sum(isinstance(result, ConflictError) for result in results) == 1
    assert len(await store.find(schema.TAGS, {"name": "race"})) == 1


@pytest.mark.asyncio
async def test_unknown_collection(store):
    with pytest.raises(ValueError):
        await store.find("nope")


@pytest.mark.asyncio
async def test_delete_clears_references_to_the_parent(store):
    user = await store.insert(schema.USERS, {"username": "gone", "email": "gone@example.com"})
    tacton = await store.insert(schema.TACTONS, {"title": "Kept", "owner_id": user["id"]})
    other = await store.insert(schema.TACTONS, {"title": "Other", "owner_id": "someone-else"})
    tag = await store.insert(schema.TAGS, {"name": "fun", "creator_id": user["id"]})

    assert await store.delete(schema.USERS, {"id": user["id"]}) == 1

    rows = {row["id"]: row for row in await store.find(schema.TACTONS)}
    assert rows[tacton["id"]]["owner_id"] is None
    assert rows[other["id"]]["owner_id"] == "someone-else"
    assert (await store.find(schema.TAGS, {"id": tag["id"]}))[0]["creator_id"] is None


@pytest.mark.asyncio
async def test_deleting_a_team_keeps_its_members(store):
    team = await store.insert(schema.TEAMS, {"name": "crew"})
    member = await store.insert(schema.USERS, {"username": "m", "email": "m@example.com", "team_id": team["id"]})

    await store.delete(schema.TEAMS, {"id": team["id"]})

    rows = await store.find(schema.USERS, {"id": member["id"]})
    assert rows[0]["team_id"] is None
