# tactjam/services/teams.py
"""
Teams: named groups users can join through their profile.

Unlike tags, a team is created explicitly; a taken name is a conflict
rather than a reuse. Deleting a team clears team_id on its members.
"""
import re
from typing import Any, List, Optional

from tactjam.core.config import settings
from tactjam.core.exceptions import ConflictError, NotFoundError, ValidationError
from tactjam.core.logging import log
from tactjam.db import schema
from tactjam.db.store import DataStore, Row
from .permissions import ActingUser, require_owner_or_admin, require_user

TEAM_NAME_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


def clean_team_name(value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError("Invalid name or length")
    name = value.strip()
    if not (settings.tactons.name_min_length <= len(name) <= settings.tactons.name_max_length):
        raise ValidationError("Invalid name or length")
    if not TEAM_NAME_PATTERN.match(name):
        raise ValidationError("Invalid name or length")
    return name


class TeamService:

    def __init__(self, store: DataStore):
        self._store = store

    async def list(self) -> List[Row]:
        return await self._store.find(schema.TEAMS)

    async def get(self, team_id: str) -> Row:
        row = await self._store.find_unique(schema.TEAMS, {"id": team_id})
        if row is None:
            raise NotFoundError("team", team_id)
        return row

    async def get_by_name(self, raw_name: Any) -> Row:
        name = clean_team_name(raw_name)
        row = await self._store.find_unique(schema.TEAMS, {"name": name})
        if row is None:
            raise NotFoundError("team", name)
        return row

    async def create(self, raw_name: Any, user: Optional[ActingUser]) -> Row:
        user = require_user(user)
        name = clean_team_name(raw_name)
        await self._ensure_free(name)
        # the unique key still rejects a concurrent create of the same name
        try:
            row = await self._store.insert(schema.TEAMS, {"name": name, "creator_id": user.id})
        except ConflictError:
            raise ConflictError("Name already taken", collection=schema.TEAMS, key={"name": name})
        log("USERS", f"Created team '{name}'", user_id=user.id)
        return row

    async def rename(self, team_id: str, raw_name: Any, user: Optional[ActingUser]) -> Row:
        name = clean_team_name(raw_name)
        row = await self.get(team_id)
        require_owner_or_admin(user, row.get("creator_id"))
        if row["name"] == name:
            return row
        await self._ensure_free(name)

        updated = await self._store.update(schema.TEAMS, {"id": team_id}, {"name": name})
        if len(updated) != 1:
            raise NotFoundError("team", team_id)
        return updated[0]

    async def delete(self, team_id: str, user: Optional[ActingUser]) -> None:
        """Creator or admin; members stay, without a team. Absent ids are a no-op."""
        user = require_user(user)
        row = await self._store.find_unique(schema.TEAMS, {"id": team_id})
        if row is None:
            return
        require_owner_or_admin(user, row.get("creator_id"))
        await self._store.delete(schema.TEAMS, {"id": team_id})
        log("USERS", f"Deleted team '{row['name']}'", user_id=user.id)

    async def _ensure_free(self, name: str) -> None:
        if await self._store.find(schema.TEAMS, {"name": name}):
            raise ConflictError("Name already taken", collection=schema.TEAMS, key={"name": name})
