# tactjam/services/resolver.py
"""
Deduplicating reference resolver.

Lookup-or-create for the rows a tacton points at:

- tags and body tags, by case-folded name
- motor position sets, by coordinate content

Every call goes to the store; there is no cache. Inserts that lose a race
against a concurrent writer are rejected by the store's unique key and the
winner is returned instead.
"""
import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from tactjam.core.exceptions import ConflictError, NotFoundError
from tactjam.core.logging import log
from tactjam.db import schema
from tactjam.db.store import DataStore, Row
from tactjam.lib.monitoring import record_reference_created
from .coordinates import Coordinates, fingerprint
from .permissions import ActingUser, require_owner_or_admin, require_user
from .validation import clean_name, unique_in_order


class ReferenceKind(Enum):
    """The two independently namespaced label families."""
    TAG = ("tag", schema.TAGS, schema.TACTON_TAG_LINKS, "tag_id")
    BODY_TAG = ("bodyTag", schema.BODY_TAGS, schema.TACTON_BODYTAG_LINKS, "bodytag_id")

    def __init__(self, label: str, collection: str, link_collection: str, link_field: str):
        self.label = label
        self.collection = collection
        self.link_collection = link_collection
        self.link_field = link_field


@dataclass
class Resolution:
    row: Row
    created: bool


class NameResolver:
    """Lookup-or-create for one ReferenceKind."""

    def __init__(self, store: DataStore, kind: ReferenceKind):
        self._store = store
        self.kind = kind

    async def lookup(self, raw_name: Any) -> Optional[Row]:
        """Lookup only; never creates."""
        name = clean_name(raw_name)
        return await self._store.find_unique(self.kind.collection, {"name": name})

    async def resolve(self, raw_name: Any, user: Optional[ActingUser]) -> Resolution:
        name = clean_name(raw_name)
        existing = await self._store.find_unique(self.kind.collection, {"name": name})
        if existing is not None:
            return Resolution(existing, False)

        user = require_user(user)
        try:
            row = await self._store.insert(self.kind.collection, {"name": name, "creator_id": user.id})
        except ConflictError:
            winner = await self._store.find_unique(self.kind.collection, {"name": name})
            if winner is None:
                raise
            log("RESOLVER", f"Lost create race for {self.kind.label} '{name}', reusing {winner['id']}")
            return Resolution(winner, False)

        log("RESOLVER", f"Created {self.kind.label} '{name}'", user_id=user.id)
        record_reference_created(self.kind.label)
        return Resolution(row, True)

    async def resolve_many(self, raw_names: List[Any], user: Optional[ActingUser]) -> List[Row]:
        """
        Resolve several names concurrently.

        All names are validated before the first store call, so one bad
        name aborts the batch without writing anything.
        """
        names = unique_in_order(clean_name(raw) for raw in raw_names)
        results = await asyncio.gather(*(self.resolve(name, user) for name in names))
        return [result.row for result in results]

    async def get(self, ref_id: str) -> Row:
        row = await self._store.find_unique(self.kind.collection, {"id": ref_id})
        if row is None:
            raise NotFoundError(self.kind.label, ref_id)
        return row

    async def get_by_name(self, raw_name: Any) -> Row:
        row = await self.lookup(raw_name)
        if row is None:
            raise NotFoundError(self.kind.label, raw_name)
        return row

    async def list(self) -> List[Row]:
        return await self._store.find(self.kind.collection)

    async def rename(self, ref_id: str, raw_name: Any, user: Optional[ActingUser]) -> Row:
        name = clean_name(raw_name)
        row = await self.get(ref_id)
        require_owner_or_admin(user, row.get("creator_id"))

        if row["name"] == name:
            return row
        taken = await self._store.find(self.kind.collection, {"name": name})
        if taken:
            raise ConflictError("Name already taken", collection=self.kind.collection, key={"name": name})

        updated = await self._store.update(self.kind.collection, {"id": ref_id}, {"name": name})
        if len(updated) != 1:
            raise NotFoundError(self.kind.label, ref_id)
        return updated[0]

    async def delete(self, ref_id: str, user: Optional[ActingUser]) -> None:
        """Creator or admin only; links pointing here cascade. Absent ids are a no-op."""
        user = require_user(user)
        row = await self._store.find_unique(self.kind.collection, {"id": ref_id})
        if row is None:
            return
        require_owner_or_admin(user, row.get("creator_id"))
        await self._store.delete(self.kind.collection, {"id": ref_id})
        log("RESOLVER", f"Deleted {self.kind.label} '{row['name']}'", user_id=user.id)


class PositionSetResolver:
    """Lookup-or-create for motor position sets, keyed by content fingerprint."""

    def __init__(self, store: DataStore):
        self._store = store

    async def lookup(self, coords: Coordinates) -> Optional[Row]:
        rows = await self._store.find(schema.POSITION_SETS, {"fingerprint": fingerprint(coords)})
        # stores without the unique key may hold duplicates; any of them will do
        return rows[0] if rows else None

    async def resolve(self, coords: Coordinates) -> Resolution:
        existing = await self.lookup(coords)
        if existing is not None:
            return Resolution(existing, False)

        payload: Dict[str, Any] = {**coords.as_columns(), "fingerprint": fingerprint(coords)}
        try:
            row = await self._store.insert(schema.POSITION_SETS, payload)
        except ConflictError:
            winner = await self.lookup(coords)
            if winner is None:
                raise
            return Resolution(winner, False)

        log("RESOLVER", f"Created position set {row['id']} with {len(coords)} position(s)")
        record_reference_created("motorPositions")
        return Resolution(row, True)

    async def get(self, position_set_id: str) -> Row:
        row = await self._store.find_unique(schema.POSITION_SETS, {"id": position_set_id})
        if row is None:
            raise NotFoundError("motor position set", position_set_id)
        return row
