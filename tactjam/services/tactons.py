# tactjam/services/tactons.py
"""
Tacton aggregate builder.

A tacton is stored as one row plus:
- a reference to a shared motor position set
- link rows to tags and body tags

Creation resolves (or creates) every referenced row first, then inserts
the tacton, then links it. Independent resolutions run concurrently and a
failure in any of them fails the whole request. Link failures after the
tacton insert are compensated by deleting the tacton again.
"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from tactjam.core.config import settings
from tactjam.core.exceptions import NotFoundError, ValidationError
from tactjam.core.logging import log
from tactjam.db import schema
from tactjam.db.store import DataStore, Row
from .coordinates import normalize, to_output
from .links import LinkReconciler
from .permissions import ActingUser, require_owner_or_admin, require_user
from .resolver import NameResolver, PositionSetResolver, ReferenceKind
from .saga import Saga
from .validation import clean_name, clean_title, names_from_entries, unique_in_order

# fields copied forward from the stored row on a partial update
MUTABLE_FIELDS = ("title", "description", "payload_blob", "position_set_id")
COORDINATE_FIELDS = ("positions", "xs", "ys", "zs")
MAX_SEARCH_TERM = 128


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _clean_description(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Invalid description")
    return value.strip()


def _clean_payload(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Invalid payload")
    return value.strip()


def _has_coordinates(data: Mapping[str, Any]) -> bool:
    return any(data.get(field) is not None for field in COORDINATE_FIELDS)


def _optional_names(data: Mapping[str, Any], field_name: str) -> Optional[List[Any]]:
    if data.get(field_name) is None:
        return None
    return names_from_entries(data[field_name], field_name)


class TactonService:
    """Create, update, delete and read tacton aggregates."""

    def __init__(self, store: DataStore):
        self._store = store
        self.positions = PositionSetResolver(store)
        self.resolvers = {kind: NameResolver(store, kind) for kind in ReferenceKind}
        self.links = {kind: LinkReconciler(store, kind) for kind in ReferenceKind}

    # ------------------------------------------------------------------
    # WRITE SIDE
    # ------------------------------------------------------------------

    async def create_tacton(self, data: Mapping[str, Any], user: Optional[ActingUser]) -> Row:
        """
        Build a tacton with its position set, tags and body tags.

        Every field and name is validated before the first write, so invalid
        input leaves the store untouched.

        Args:
            data: title, payload_blob, optional description, positions or
                xs/ys/zs, optional tags and bodyTags as [{"name": ...}]
            user: acting user; becomes the owner

        Returns:
            The persisted tacton row
        """
        user = require_user(user)

        if data.get("title") is None or data.get("payload_blob") is None:
            raise ValidationError("missing body parameters")
        title = clean_title(data["title"])
        payload_blob = _clean_payload(data["payload_blob"])
        description = _clean_description(data.get("description"))
        coords = normalize(data, require_non_empty=settings.tactons.require_positions)

        tag_names = unique_in_order(clean_name(n) for n in (_optional_names(data, "tags") or []))
        body_tag_names = unique_in_order(clean_name(n) for n in (_optional_names(data, "bodyTags") or []))

        position_set = (await self.positions.resolve(coords)).row

        tags, body_tags = await asyncio.gather(
            self.resolvers[ReferenceKind.TAG].resolve_many(tag_names, user),
            self.resolvers[ReferenceKind.BODY_TAG].resolve_many(body_tag_names, user),
        )

        async with Saga("create tacton") as saga:
            tacton = await self._store.insert(schema.TACTONS, {
                "owner_id": user.id,
                "title": title,
                "description": description,
                "payload_blob": payload_blob,
                "position_set_id": position_set["id"],
                "last_updated_at": _now(),
            })
            saga.on_failure(
                "delete tacton",
                lambda: self._store.delete(schema.TACTONS, {"id": tacton["id"]}),
            )

            await asyncio.gather(
                self.links[ReferenceKind.TAG].add_links(tacton["id"], tags),
                self.links[ReferenceKind.BODY_TAG].add_links(tacton["id"], body_tags),
            )

        log("TACTONS", f"Created tacton '{title}' ({tacton['id']}) with "
                       f"{len(tags)} tag(s), {len(body_tags)} body tag(s)", user_id=user.id)
        return tacton

    async def update_tacton(self, tacton_id: str, changes: Mapping[str, Any], user: Optional[ActingUser]) -> Row:
        """
        Partial update. Absent (or null) fields keep their stored value;
        present fields must be valid. last_updated_at is always refreshed.

        A new position set is resolved when coordinates are given; the old
        one is kept since other tactons may share it.
        """
        existing = await self._load(tacton_id)
        require_owner_or_admin(user, existing.get("owner_id"))

        staged: Dict[str, Any] = {}
        if changes.get("title") is not None:
            staged["title"] = clean_title(changes["title"])
        if changes.get("description") is not None:
            staged["description"] = _clean_description(changes["description"])
        if changes.get("payload_blob") is not None:
            staged["payload_blob"] = _clean_payload(changes["payload_blob"])

        if _has_coordinates(changes):
            coords = normalize(changes, require_non_empty=settings.tactons.require_positions)
            staged["position_set_id"] = (await self.positions.resolve(coords)).row["id"]

        merged = {field: existing.get(field) for field in MUTABLE_FIELDS}
        merged.update(staged)
        merged["last_updated_at"] = _now()

        updated = await self._store.update(schema.TACTONS, {"id": tacton_id}, merged)
        if len(updated) != 1:
            raise NotFoundError("tacton", tacton_id)

        log("TACTONS", f"Updated tacton {tacton_id}: {sorted(staged) or 'timestamp only'}")
        return updated[0]

    async def delete_tacton(self, tacton_id: str, user: Optional[ActingUser]) -> None:
        """Owner or admin; link rows go with it through the store's cascade."""
        user = require_user(user)
        existing = await self._store.find_unique(schema.TACTONS, {"id": tacton_id})
        if existing is None:
            return
        require_owner_or_admin(user, existing.get("owner_id"))

        await self._store.delete(schema.TACTONS, {"id": tacton_id})
        log("TACTONS", f"Deleted tacton {tacton_id}", user_id=user.id)

    async def add_links(
        self,
        tacton_id: str,
        tags: Optional[List[Any]],
        body_tags: Optional[List[Any]],
        user: Optional[ActingUser],
    ) -> Dict[str, List[Row]]:
        """Resolve (creating as needed) and link tags / body tags; idempotent."""
        tag_names, body_tag_names = self._requested_names(tags, body_tags)
        tag_names = unique_in_order(clean_name(n) for n in tag_names)
        body_tag_names = unique_in_order(clean_name(n) for n in body_tag_names)

        tacton = await self._load(tacton_id)
        user = require_owner_or_admin(user, tacton.get("owner_id"))

        async def _add(kind: ReferenceKind, names: List[str]) -> List[Row]:
            if not names:
                return []
            refs = await self.resolvers[kind].resolve_many(names, user)
            return await self.links[kind].add_links(tacton_id, refs)

        created_tags, created_body_tags = await asyncio.gather(
            _add(ReferenceKind.TAG, tag_names),
            _add(ReferenceKind.BODY_TAG, body_tag_names),
        )
        await self._touch(tacton_id)
        return {"tags": created_tags, "bodyTags": created_body_tags}

    async def remove_links(
        self,
        tacton_id: str,
        tags: Optional[List[Any]],
        body_tags: Optional[List[Any]],
        user: Optional[ActingUser],
    ) -> int:
        """Unlink by name; unknown names and absent links are no-ops."""
        tag_names, body_tag_names = self._requested_names(tags, body_tags)

        tacton = await self._load(tacton_id)
        require_owner_or_admin(user, tacton.get("owner_id"))

        removed = await asyncio.gather(
            self.links[ReferenceKind.TAG].remove_links(tacton_id, tag_names),
            self.links[ReferenceKind.BODY_TAG].remove_links(tacton_id, body_tag_names),
        )
        await self._touch(tacton_id)
        return sum(removed)

    @staticmethod
    def _requested_names(tags: Optional[List[Any]], body_tags: Optional[List[Any]]):
        if tags is None and body_tags is None:
            raise ValidationError("tags or bodyTags needed")
        tag_names = names_from_entries(tags, "tags") if tags is not None else []
        body_tag_names = names_from_entries(body_tags, "bodyTags") if body_tags is not None else []
        return tag_names, body_tag_names

    async def _load(self, tacton_id: str) -> Row:
        row = await self._store.find_unique(schema.TACTONS, {"id": tacton_id})
        if row is None:
            raise NotFoundError("tacton", tacton_id)
        return row

    async def _touch(self, tacton_id: str) -> None:
        await self._store.update(schema.TACTONS, {"id": tacton_id}, {"last_updated_at": _now()})

    # ------------------------------------------------------------------
    # READ SIDE
    # ------------------------------------------------------------------

    async def get_aggregate(self, tacton_id: str) -> Row:
        tacton = await self._load(tacton_id)
        return (await self._compose([tacton]))[0]

    async def list_aggregates(self) -> List[Row]:
        return await self._compose(await self._store.find(schema.TACTONS))

    async def list_owned(self, user: Optional[ActingUser]) -> List[Row]:
        user = require_user(user)
        return await self._compose(await self._store.find(schema.TACTONS, {"owner_id": user.id}))

    async def search(self, term: Any) -> List[Row]:
        """Case-insensitive substring match on title and description."""
        if not isinstance(term, str) or not term.strip() or len(term.strip()) > MAX_SEARCH_TERM:
            raise ValidationError("Invalid search term")
        needle = term.strip().casefold()

        matches = [
            row for row in await self._store.find(schema.TACTONS)
            if needle in (row.get("title") or "").casefold()
            or needle in (row.get("description") or "").casefold()
        ]
        return await self._compose(matches)

    async def _by_ids(self, collection: str, ids: List[str]) -> Dict[str, Row]:
        if not ids:
            return {}
        rows = await self._store.find(collection, {"id": {"$in": ids}})
        return {row["id"]: row for row in rows}

    async def _compose(self, tactons: List[Row]) -> List[Row]:
        """Attach position sets, tags and body tags using batched lookups."""
        if not tactons:
            return []
        tacton_ids = [tacton["id"] for tacton in tactons]
        position_ids = unique_in_order(tacton["position_set_id"] for tacton in tactons)
        tag_kind, body_kind = ReferenceKind.TAG, ReferenceKind.BODY_TAG

        positions, tag_links, body_links = await asyncio.gather(
            self._by_ids(schema.POSITION_SETS, position_ids),
            self._store.find(tag_kind.link_collection, {"tacton_id": {"$in": tacton_ids}}),
            self._store.find(body_kind.link_collection, {"tacton_id": {"$in": tacton_ids}}),
        )
        tags, body_tags = await asyncio.gather(
            self._by_ids(tag_kind.collection, unique_in_order(link[tag_kind.link_field] for link in tag_links)),
            self._by_ids(body_kind.collection, unique_in_order(link[body_kind.link_field] for link in body_links)),
        )

        def _labels(tacton_id: str, links: List[Row], field: str, rows: Dict[str, Row]) -> List[Row]:
            ids = unique_in_order(link[field] for link in links if link["tacton_id"] == tacton_id)
            labels = [rows[ref_id] for ref_id in ids if ref_id in rows]
            return sorted(labels, key=lambda label: label["name"])

        aggregates = []
        for tacton in tactons:
            position_set = positions.get(tacton["position_set_id"])
            aggregates.append({
                **tacton,
                "motor_positions": to_output(position_set) if position_set else None,
                "tags": _labels(tacton["id"], tag_links, tag_kind.link_field, tags),
                "bodyTags": _labels(tacton["id"], body_links, body_kind.link_field, body_tags),
            })
        return aggregates
