# tactjam/db/store.py
"""
Generic data access over named collections.

Every service talks to the datastore through this interface only:

    find(collection, filter)              -> list of rows
    insert(collection, row)               -> inserted row (with id)
    update(collection, filter, changes)   -> updated rows
    delete(collection, filter)            -> number of rows removed

Rows are plain dicts. The filter dialect is a conjunction of field
equalities, where a value may also be {"$in": [...]}.

Two implementations:
- MemoryDataStore: in-process, used by tests and STORE_BACKEND=memory
- BeanieDataStore: MongoDB via motor + Beanie documents
"""
import asyncio
import copy
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from tactjam.core.exceptions import ConflictError, DependencyError
from tactjam.core.logging import log
from tactjam.db import schema

Row = Dict[str, Any]
Filter = Dict[str, Any]

SUPPORTED_OPERATORS = {"$in"}


def row_matches(row: Row, flt: Filter) -> bool:
    """Evaluate the filter dialect against a single row."""
    for field, condition in flt.items():
        value = row.get(field)
        if isinstance(condition, dict):
            for op, operand in condition.items():
                if op not in SUPPORTED_OPERATORS:
                    raise ValueError(f"Unsupported filter operator: {op}")
                if value not in operand:
                    return False
        elif value != condition:
            return False
    return True


class DataStore(ABC):
    """Datastore collaborator. Deletes follow schema.CASCADES and schema.SET_NULL."""

    @abstractmethod
    async def find(self, collection: str, flt: Optional[Filter] = None) -> List[Row]:
        ...

    @abstractmethod
    async def insert(self, collection: str, row: Row) -> Row:
        ...

    @abstractmethod
    async def update(self, collection: str, flt: Filter, changes: Row) -> List[Row]:
        ...

    @abstractmethod
    async def _delete(self, collection: str, flt: Filter) -> int:
        ...

    async def close(self) -> None:
        return None

    async def find_unique(self, collection: str, flt: Filter) -> Optional[Row]:
        """Return the row if exactly one matches, else None."""
        rows = await self.find(collection, flt)
        if len(rows) != 1:
            return None
        return rows[0]

    async def delete(self, collection: str, flt: Filter) -> int:
        children = schema.CASCADES.get(collection, [])
        orphans = schema.SET_NULL.get(collection, [])
        doomed = await self.find(collection, flt) if children or orphans else []

        count = await self._delete(collection, flt)

        if doomed:
            ids = [row["id"] for row in doomed]
            for child, foreign_key in children:
                removed = await self.delete(child, {foreign_key: {"$in": ids}})
                if removed:
                    log("STORE", f"Cascade removed {removed} row(s) from {child}")
            for child, foreign_key in orphans:
                detached = await self.update(child, {foreign_key: {"$in": ids}}, {foreign_key: None})
                if detached:
                    log("STORE", f"Cleared {foreign_key} on {len(detached)} row(s) in {child}")
        return count


# ---------------------------------------------------------------------------
# IN-MEMORY
# ---------------------------------------------------------------------------

class MemoryDataStore(DataStore):
    """
    Dict-backed store with the same unique keys and cascades as MongoDB.

    Each call yields to the event loop first so concurrent fan-out
    interleaves the way it does over the network.
    """

    def __init__(self):
        self._collections: Dict[str, List[Row]] = {name: [] for name in schema.COLLECTIONS}

    def _rows(self, collection: str) -> List[Row]:
        if collection not in self._collections:
            raise ValueError(f"Unknown collection: {collection}")
        return self._collections[collection]

    def _check_unique(self, collection: str, candidate: Row, ignore_id: Optional[str] = None) -> None:
        for key in schema.UNIQUE_KEYS.get(collection, []):
            wanted = {field: candidate.get(field) for field in key}
            for existing in self._rows(collection):
                if existing["id"] == ignore_id:
                    continue
                if all(existing.get(field) == value for field, value in wanted.items()):
                    raise ConflictError(
                        f"Duplicate entry in {collection}",
                        collection=collection,
                        key=wanted,
                    )

    async def find(self, collection: str, flt: Optional[Filter] = None) -> List[Row]:
        await asyncio.sleep(0)
        flt = flt or {}
        return [copy.deepcopy(row) for row in self._rows(collection) if row_matches(row, flt)]

    async def insert(self, collection: str, row: Row) -> Row:
        await asyncio.sleep(0)
        stored = copy.deepcopy(row)
        stored.setdefault("id", schema.new_id())
        if any(existing["id"] == stored["id"] for existing in self._rows(collection)):
            raise ConflictError(f"Duplicate id in {collection}", collection=collection, key={"id": stored["id"]})
        self._check_unique(collection, stored)
        self._rows(collection).append(stored)
        log("STORE", f"Inserted into {collection}", stored["id"])
        return copy.deepcopy(stored)

    async def update(self, collection: str, flt: Filter, changes: Row) -> List[Row]:
        await asyncio.sleep(0)
        if "id" in changes:
            raise ValueError("Row ids are immutable")

        targets = [row for row in self._rows(collection) if row_matches(row, flt)]
        # validate every target before touching any of them
        for row in targets:
            self._check_unique(collection, {**row, **changes}, ignore_id=row["id"])
        for row in targets:
            row.update(copy.deepcopy(changes))
        return [copy.deepcopy(row) for row in targets]

    async def _delete(self, collection: str, flt: Filter) -> int:
        await asyncio.sleep(0)
        rows = self._rows(collection)
        kept = [row for row in rows if not row_matches(row, flt)]
        removed = len(rows) - len(kept)
        self._collections[collection] = kept
        return removed


# ---------------------------------------------------------------------------
# MONGODB (BEANIE)
# ---------------------------------------------------------------------------

def to_mongo_filter(flt: Optional[Filter]) -> Filter:
    """Rows expose `id`; MongoDB stores it as `_id`."""
    return {("_id" if field == "id" else field): value for field, value in (flt or {}).items()}


@contextmanager
def driver_errors(operation: str, collection: str):
    """Translate pymongo failures into the application taxonomy."""
    from pymongo.errors import DuplicateKeyError, PyMongoError

    try:
        yield
    except DuplicateKeyError as e:
        key = (e.details or {}).get("keyValue")
        raise ConflictError(f"Duplicate entry in {collection}", collection=collection, key=key) from e
    except PyMongoError as e:
        raise DependencyError(operation, str(e)) from e


class BeanieDataStore(DataStore):
    """Store backed by the Beanie documents registered in tactjam.models."""

    def __init__(self, documents=None):
        if documents is None:
            from tactjam.models import DOCUMENTS
            documents = DOCUMENTS
        self._documents = documents

    def _document(self, operation: str, collection: str):
        from tactjam.db import get_connection_error, is_connected

        if not is_connected():
            raise DependencyError(operation, get_connection_error() or "database not connected")
        if collection not in self._documents:
            raise ValueError(f"Unknown collection: {collection}")
        return self._documents[collection]

    @staticmethod
    def _to_row(document) -> Row:
        return document.model_dump(exclude={"revision_id"})

    async def find(self, collection: str, flt: Optional[Filter] = None) -> List[Row]:
        document_cls = self._document("find", collection)
        with driver_errors("find", collection):
            documents = await document_cls.find(to_mongo_filter(flt)).to_list()
        return [self._to_row(document) for document in documents]

    async def insert(self, collection: str, row: Row) -> Row:
        document_cls = self._document("insert", collection)
        document = document_cls(**row)
        with driver_errors("insert", collection):
            await document.insert()
        log("STORE", f"Inserted into {collection}", document.id)
        return self._to_row(document)

    async def update(self, collection: str, flt: Filter, changes: Row) -> List[Row]:
        if "id" in changes:
            raise ValueError("Row ids are immutable")
        document_cls = self._document("update", collection)
        with driver_errors("update", collection):
            targets = await document_cls.find(to_mongo_filter(flt)).to_list()
            ids = [document.id for document in targets]
            if not ids:
                return []
            await document_cls.find({"_id": {"$in": ids}}).update({"$set": changes})
            updated = await document_cls.find({"_id": {"$in": ids}}).to_list()
        return [self._to_row(document) for document in updated]

    async def _delete(self, collection: str, flt: Filter) -> int:
        document_cls = self._document("delete", collection)
        with driver_errors("delete", collection):
            result = await document_cls.find(to_mongo_filter(flt)).delete()
        return result.deleted_count if result is not None else 0

    async def close(self) -> None:
        from tactjam.db import disconnect_db
        await disconnect_db()
