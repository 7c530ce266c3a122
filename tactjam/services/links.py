# tactjam/services/links.py
"""
Tag-link reconciler.

Keeps the tacton <-> tag and tacton <-> body-tag association rows free of
duplicates: adding only inserts the links that are missing, removing only
deletes links that exist. Both directions are idempotent.
"""
import asyncio
from typing import Any, List, Optional

from tactjam.core.exceptions import ConflictError, ValidationError
from tactjam.core.logging import log
from tactjam.db.store import DataStore, Row
from .resolver import NameResolver, ReferenceKind
from .validation import clean_name, unique_in_order


class LinkReconciler:

    def __init__(self, store: DataStore, kind: ReferenceKind):
        self._store = store
        self.kind = kind

    async def links_for(self, tacton_id: str) -> List[Row]:
        return await self._store.find(self.kind.link_collection, {"tacton_id": tacton_id})

    async def add_links(self, tacton_id: str, refs: List[Row]) -> List[Row]:
        """
        Link every ref in `refs` to the tacton; refs already linked are skipped.

        Returns only the link rows created by this call.
        """
        candidate_ids = unique_in_order(ref["id"] for ref in refs)
        if not candidate_ids:
            return []

        existing = await self._store.find(
            self.kind.link_collection,
            {"tacton_id": tacton_id, self.kind.link_field: {"$in": candidate_ids}},
        )
        already_linked = {row[self.kind.link_field] for row in existing}
        missing = [ref_id for ref_id in candidate_ids if ref_id not in already_linked]

        created = await asyncio.gather(*(self._link(tacton_id, ref_id) for ref_id in missing))
        created = [row for row in created if row is not None]
        log("LINKS", f"Linked {len(created)} {self.kind.label}(s) to tacton {tacton_id}, "
                     f"{len(already_linked)} already present")
        return created

    async def _link(self, tacton_id: str, ref_id: str) -> Optional[Row]:
        try:
            return await self._store.insert(
                self.kind.link_collection,
                {"tacton_id": tacton_id, self.kind.link_field: ref_id},
            )
        except ConflictError:
            # a concurrent request created the same link; already linked
            log("LINKS", f"{self.kind.label} {ref_id} linked concurrently to tacton {tacton_id}")
            return None

    async def remove_links(self, tacton_id: str, ref_names: List[Any]) -> int:
        """
        Unlink refs by name. Unknown names and missing links are no-ops.

        Returns the number of link rows deleted.
        """
        names = []
        for raw in ref_names:
            try:
                names.append(clean_name(raw))
            except ValidationError:
                # a name that can never be stored cannot be linked either
                continue
        names = unique_in_order(names)

        resolver = NameResolver(self._store, self.kind)
        refs = await asyncio.gather(*(resolver.lookup(name) for name in names))
        resolved = [ref for ref in refs if ref is not None]

        counts = await asyncio.gather(*(
            self._store.delete(
                self.kind.link_collection,
                {"tacton_id": tacton_id, self.kind.link_field: ref["id"]},
            )
            for ref in resolved
        ))
        removed = sum(counts)
        log("LINKS", f"Unlinked {removed} {self.kind.label}(s) from tacton {tacton_id}")
        return removed
