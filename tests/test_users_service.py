import pytest
from faker import Faker

from conftest import tacton_payload
from tactjam.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from tactjam.db import schema
from tactjam.services import ActingUser
from tactjam.services.users import public_profile

fake = Faker()


def _account(**overrides):
    account = {
        "username": fake.lexify(text="user????????"),
        "email": fake.unique.email(),
        "name": fake.name(),
        "password": "s3cret-password",
    }
    account.update(overrides)
    return account


@pytest.mark.asyncio
async def test_register_stores_hash_not_password(store, user_service):
    account = _account(email="Someone@Example.com")
    row = await user_service.register(account)

    assert row["email"] == "someone@example.com"
    assert row["password"] != account["password"]
    assert row["admin"] is False and row["banned"] is False
    assert "password" not in public_profile(row)


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [
    {"username": "a"},
    {"username": "has space"},
    {"email": "not-an-email"},
    {"name": ""},
    {"password": "short"},
    {"password": "x" * 73},
    {"password": None},
])
async def test_register_validation(store, user_service, overrides):
    with pytest.raises(ValidationError):
        await user_service.register(_account(**overrides))
    assert await store.find(schema.USERS) == []


@pytest.mark.asyncio
async def test_register_conflicts(store, user_service):
    account = _account()
    await user_service.register(account)

    with pytest.raises(ConflictError):
        await user_service.register(_account(username=account["username"]))
    with pytest.raises(ConflictError):
        await user_service.register(_account(email=account["email"].upper()))


@pytest.mark.asyncio
async def test_authenticate(store, user_service):
    account = _account()
    row = await user_service.register(account)

    logged_in = await user_service.authenticate(account["username"], account["password"])
    assert logged_in["id"] == row["id"]
    assert logged_in["last_login_at"] is not None

    with pytest.raises(PermissionDeniedError):
        await user_service.authenticate(account["username"], "wrong-password")
    with pytest.raises(PermissionDeniedError):
        await user_service.authenticate("nobody", account["password"])


@pytest.mark.asyncio
async def test_banned_users_are_rejected(store, user_service):
    account = _account()
    row = await user_service.register(account)
    await store.update(schema.USERS, {"id": row["id"]}, {"banned": True})

    with pytest.raises(PermissionDeniedError):
        await user_service.authenticate(account["username"], account["password"])
    with pytest.raises(PermissionDeniedError):
        await user_service.acting_user(row["id"])


@pytest.mark.asyncio
async def test_acting_user(store, user_service):
    row = await user_service.register(_account())
    await store.update(schema.USERS, {"id": row["id"]}, {"admin": True})

    user = await user_service.acting_user(row["id"])
    assert user.id == row["id"] and user.admin is True

    with pytest.raises(PermissionDeniedError):
        await user_service.acting_user("missing")


# ═══════════════════════════════════════════════════════
# ACCOUNT MANAGEMENT
# ═══════════════════════════════════════════════════════

def _acting(row, admin=False):
    return ActingUser(id=row["id"], username=row["username"], admin=admin)


@pytest.mark.asyncio
async def test_get_profile_is_admin_only(store, user_service, admin):
    row = await user_service.register(_account())

    profile = await user_service.get_profile(row["id"], admin)
    assert profile["username"] == row["username"]

    with pytest.raises(PermissionDeniedError):
        await user_service.get_profile(row["id"], _acting(row))
    with pytest.raises(NotFoundError):
        await user_service.get_profile("missing", admin)


@pytest.mark.asyncio
async def test_update_profile_by_self_and_admin(store, user_service, admin):
    row = await user_service.register(_account())
    other = await user_service.register(_account())

    updated = await user_service.update_profile(row["id"], {"name": "New Name", "email": "NEW@example.com"}, _acting(row))
    assert updated["name"] == "New Name"
    assert updated["email"] == "new@example.com"
    assert updated["username"] == row["username"]

    updated = await user_service.update_profile(row["id"], {"username": "renamedbyadmin"}, admin)
    assert updated["username"] == "renamedbyadmin"

    with pytest.raises(PermissionDeniedError):
        await user_service.update_profile(row["id"], {"name": "Hijack"}, _acting(other))


@pytest.mark.asyncio
async def test_update_profile_keeps_unique_fields_unique(store, user_service):
    row = await user_service.register(_account())
    other = await user_service.register(_account())

    with pytest.raises(ConflictError):
        await user_service.update_profile(row["id"], {"username": other["username"]}, _acting(row))
    with pytest.raises(ConflictError):
        await user_service.update_profile(row["id"], {"email": other["email"]}, _acting(row))

    # keeping one's own username is not a conflict
    updated = await user_service.update_profile(row["id"], {"username": row["username"]}, _acting(row))
    assert updated["username"] == row["username"]

    with pytest.raises(ValidationError):
        await user_service.update_profile(row["id"], {"username": "x"}, _acting(row))


@pytest.mark.asyncio
async def test_update_profile_team_must_exist(store, user_service, team_service):
    row = await user_service.register(_account())
    team = await team_service.create("crew", _acting(row))

    updated = await user_service.update_profile(row["id"], {"team_id": team["id"]}, _acting(row))
    assert updated["team_id"] == team["id"]

    with pytest.raises(NotFoundError):
        await user_service.update_profile(row["id"], {"team_id": "missing"}, _acting(row))


@pytest.mark.asyncio
async def test_change_password(store, user_service):
    account = _account()
    row = await user_service.register(account)

    await user_service.change_password(account["password"], "another-password", _acting(row))

    with pytest.raises(PermissionDeniedError):
        await user_service.authenticate(account["username"], account["password"])
    logged_in = await user_service.authenticate(account["username"], "another-password")
    assert logged_in["id"] == row["id"]


@pytest.mark.asyncio
async def test_change_password_rejections(store, user_service):
    account = _account()
    row = await user_service.register(account)
    stored_hash = row["password"]

    with pytest.raises(PermissionDeniedError):
        await user_service.change_password("wrong-password", "another-password", _acting(row))
    with pytest.raises(ValidationError):
        await user_service.change_password(account["password"], "short", _acting(row))
    with pytest.raises(ValidationError):
        await user_service.change_password(None, "another-password", _acting(row))

    assert (await user_service.get(row["id"]))["password"] == stored_hash


@pytest.mark.asyncio
async def test_delete_user_keeps_their_tactons(store, user_service, tacton_service, admin):
    row = await user_service.register(_account())
    tacton = await tacton_service.create_tacton(tacton_payload(), _acting(row))

    await user_service.delete_user(row["id"], admin)

    assert await user_service.get(row["id"]) is None
    kept = await store.find(schema.TACTONS, {"id": tacton["id"]})
    assert kept[0]["owner_id"] is None
    # absent users are a no-op
    await user_service.delete_user(row["id"], admin)


@pytest.mark.asyncio
async def test_delete_user_rules(store, user_service, admin):
    row = await user_service.register(_account())

    with pytest.raises(PermissionDeniedError):
        await user_service.delete_user(row["id"], _acting(row))
    with pytest.raises(ValidationError):
        await user_service.delete_user(admin.id, admin)
    assert await user_service.get(row["id"]) is not None
