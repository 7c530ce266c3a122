# tactjam/services/users.py
"""
User accounts: registration, credential checks, profile and account
management, and the permission gate every authenticated request passes
through.
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from tactjam.auth.security import MAX_PASSWORD_BYTES, hash_password, verify_password
from tactjam.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from tactjam.core.logging import log
from tactjam.db import schema
from tactjam.db.store import DataStore, Row
from .permissions import ActingUser, require_admin, require_owner_or_admin, require_user

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9]{2,128}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PUBLIC_FIELDS = ("id", "username", "email", "name", "created_at", "last_login_at", "team_id", "banned", "admin")
MIN_PASSWORD_LENGTH = 8


def public_profile(row: Row) -> Dict[str, Any]:
    return {field: row.get(field) for field in PUBLIC_FIELDS}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _require_str(data: Mapping[str, Any], field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str):
        raise ValidationError("missing body parameters")
    return value.strip()


def _check_username(username: str) -> str:
    if not USERNAME_PATTERN.match(username):
        raise ValidationError("Invalid username")
    return username


def _check_email(email: str) -> str:
    email = email.lower()
    if len(email) > 254 or not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email")
    return email


def _check_name(name: str) -> str:
    if not (1 <= len(name) <= 128):
        raise ValidationError("Invalid name")
    return name


def _check_password(password: Any) -> str:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password needs at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password may not exceed {MAX_PASSWORD_BYTES} bytes")
    return password


class UserService:

    def __init__(self, store: DataStore):
        self._store = store

    async def register(self, data: Mapping[str, Any]) -> Row:
        username = _check_username(_require_str(data, "username"))
        email = _check_email(_require_str(data, "email"))
        name = _check_name(_require_str(data, "name"))
        password = _check_password(data.get("password"))

        await self._ensure_free(username=username, email=email)

        now = _now()
        row = await self._store.insert(schema.USERS, {
            "username": username,
            "email": email,
            "name": name,
            "password": hash_password(password),
            "created_at": now,
            "updated_at": now,
            "last_login_at": None,
            "team_id": None,
            "banned": False,
            "admin": False,
        })
        log("AUTH", f"Registered user '{username}'", user_id=row["id"])
        return row

    async def authenticate(self, username: Any, password: Any) -> Row:
        """Verify a credential; refreshes last_login_at on success."""
        if not isinstance(username, str) or not isinstance(password, str):
            raise ValidationError("missing body parameters")

        row = await self._store.find_unique(schema.USERS, {"username": username.strip()})
        if row is None or not verify_password(password, row["password"]):
            raise PermissionDeniedError("Invalid username or password")
        if row.get("banned"):
            raise PermissionDeniedError("User is banned")

        updated = await self._store.update(schema.USERS, {"id": row["id"]}, {"last_login_at": _now()})
        log("AUTH", f"User '{row['username']}' logged in", user_id=row["id"])
        return updated[0] if updated else row

    async def acting_user(self, user_id: str) -> ActingUser:
        """The user must exist exactly once and not be banned."""
        row = await self._store.find_unique(schema.USERS, {"id": user_id})
        if row is None:
            raise PermissionDeniedError("User authentication error")
        if row.get("banned"):
            raise PermissionDeniedError("User is banned")
        return ActingUser(id=row["id"], username=row["username"], admin=bool(row.get("admin")))

    async def get(self, user_id: str) -> Optional[Row]:
        return await self._store.find_unique(schema.USERS, {"id": user_id})

    # ------------------------------------------------------------------
    # ACCOUNT MANAGEMENT
    # ------------------------------------------------------------------

    async def get_profile(self, user_id: str, user: Optional[ActingUser]) -> Row:
        """Admins only."""
        require_admin(user)
        return await self._load(user_id)

    async def update_profile(self, user_id: str, changes: Mapping[str, Any], user: Optional[ActingUser]) -> Row:
        """
        Partial profile update by the user themselves or an admin.

        Absent (or null) fields are left alone. A changed username or
        e-mail must still be free; a team id must name an existing team.
        """
        user = require_user(user)
        target = await self._load(user_id)
        require_owner_or_admin(user, target["id"])

        staged: Dict[str, Any] = {}
        if changes.get("username") is not None:
            staged["username"] = _check_username(_require_str(changes, "username"))
        if changes.get("email") is not None:
            staged["email"] = _check_email(_require_str(changes, "email"))
        if changes.get("name") is not None:
            staged["name"] = _check_name(_require_str(changes, "name"))
        if changes.get("team_id") is not None:
            team_id = changes["team_id"]
            if not isinstance(team_id, str) or await self._store.find_unique(schema.TEAMS, {"id": team_id}) is None:
                raise NotFoundError("team", team_id)
            staged["team_id"] = team_id

        await self._ensure_free(
            username=staged.get("username"),
            email=staged.get("email"),
            ignore_id=target["id"],
        )

        staged["updated_at"] = _now()
        updated = await self._store.update(schema.USERS, {"id": target["id"]}, staged)
        if len(updated) != 1:
            raise NotFoundError("user", user_id)

        log("USERS", f"Updated profile of {target['username']}: {sorted(staged)}", user_id=user.id)
        return updated[0]

    async def change_password(self, old_password: Any, new_password: Any, user: Optional[ActingUser]) -> None:
        """The acting user's own password; the old one must match."""
        user = require_user(user)
        if not isinstance(old_password, str) or new_password is None:
            raise ValidationError("Password(s) missing")

        row = await self._load(user.id)
        if not verify_password(old_password, row["password"]):
            raise PermissionDeniedError("Invalid password")
        new_password = _check_password(new_password)

        await self._store.update(
            schema.USERS,
            {"id": row["id"]},
            {"password": hash_password(new_password), "updated_at": _now()},
        )
        log("USERS", "Password changed", user_id=user.id)

    async def delete_user(self, user_id: str, user: Optional[ActingUser]) -> None:
        """
        Admins only, and never their own account. The user's tactons, tags
        and teams stay, with the owner/creator reference cleared.
        """
        user = require_admin(user)
        if user_id == user.id:
            raise ValidationError("You can't delete yourself")
        if await self._store.find_unique(schema.USERS, {"id": user_id}) is None:
            return
        await self._store.delete(schema.USERS, {"id": user_id})
        log("USERS", f"Deleted user {user_id}", user_id=user.id)

    async def _load(self, user_id: str) -> Row:
        row = await self._store.find_unique(schema.USERS, {"id": user_id})
        if row is None:
            raise NotFoundError("user", user_id)
        return row

    async def _ensure_free(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        ignore_id: Optional[str] = None,
    ) -> None:
        for field, value in (("username", username), ("email", email)):
            if value is None:
                continue
            taken = [row for row in await self._store.find(schema.USERS, {field: value}) if row["id"] != ignore_id]
            if taken:
                raise ConflictError(f"{field.capitalize()} already taken", collection=schema.USERS, key={field: value})
