# tactjam/api/tags.py
"""
Tag and body-tag routes.

Both label families expose the same endpoints; one router is built per
ReferenceKind so the two stay structurally identical.
"""
from typing import List

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from tactjam.db.store import DataStore
from tactjam.services import ActingUser, NameResolver, ReferenceKind
from .deps import get_acting_user, get_store
from .schemas import LabelResponse


class LabelRequest(BaseModel):
    name: str


def build_router(kind: ReferenceKind, prefix: str, title: str) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[title])

    def get_resolver(store: DataStore = Depends(get_store)) -> NameResolver:
        return NameResolver(store, kind)

    @router.get("", response_model=List[LabelResponse])
    async def list_labels(resolver: NameResolver = Depends(get_resolver)):
        return await resolver.list()

    @router.get("/search/id/{ref_id}", response_model=LabelResponse)
    async def get_label(ref_id: str, resolver: NameResolver = Depends(get_resolver)):
        return await resolver.get(ref_id)

    @router.get("/search/name/{name}", response_model=LabelResponse)
    async def get_label_by_name(name: str, resolver: NameResolver = Depends(get_resolver)):
        return await resolver.get_by_name(name)

    @router.post("", response_model=LabelResponse)
    async def resolve_label(
        data: LabelRequest,
        response: Response,
        user: ActingUser = Depends(get_acting_user),
        resolver: NameResolver = Depends(get_resolver),
    ):
        """Return the label with this name, creating it when absent (201)."""
        resolution = await resolver.resolve(data.name, user)
        response.status_code = status.HTTP_201_CREATED if resolution.created else status.HTTP_200_OK
        return resolution.row

    @router.patch("/{ref_id}", response_model=LabelResponse)
    async def rename_label(
        ref_id: str,
        data: LabelRequest,
        user: ActingUser = Depends(get_acting_user),
        resolver: NameResolver = Depends(get_resolver),
    ):
        return await resolver.rename(ref_id, data.name, user)

    @router.delete("/{ref_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_label(
        ref_id: str,
        user: ActingUser = Depends(get_acting_user),
        resolver: NameResolver = Depends(get_resolver),
    ) -> None:
        await resolver.delete(ref_id, user)

    return router


tags_router = build_router(ReferenceKind.TAG, "/api/tags", "Tags")
body_tags_router = build_router(ReferenceKind.BODY_TAG, "/api/body-tags", "Body Tags")
