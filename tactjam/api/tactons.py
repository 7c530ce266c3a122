# tactjam/api/tactons.py
"""
Tacton routes.

Creation, partial update and deletion of tacton aggregates, plus the
incremental add/remove of tag and body-tag links.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import AliasChoices, BaseModel, Field

from tactjam.services import ActingUser, TactonService
from .deps import get_acting_user, get_tacton_service
from .schemas import Coordinate, NameEntry, PositionIn, TactonAggregateResponse, TactonResponse

router = APIRouter(prefix="/api/tactons", tags=["Tactons"])


class CreateTactonRequest(BaseModel):
    title: str
    description: Optional[str] = None
    # older clients send the vibration payload as "libvtp"
    payload_blob: str = Field(validation_alias=AliasChoices("payload_blob", "libvtp"))
    positions: Optional[List[PositionIn]] = None
    xs: Optional[List[Coordinate]] = None
    ys: Optional[List[Coordinate]] = None
    zs: Optional[List[Coordinate]] = None
    tags: Optional[List[NameEntry]] = None
    bodyTags: Optional[List[NameEntry]] = None


class UpdateTactonRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    payload_blob: Optional[str] = Field(default=None, validation_alias=AliasChoices("payload_blob", "libvtp"))
    positions: Optional[List[PositionIn]] = None
    xs: Optional[List[Coordinate]] = None
    ys: Optional[List[Coordinate]] = None
    zs: Optional[List[Coordinate]] = None


class LinkRequest(BaseModel):
    tags: Optional[List[NameEntry]] = None
    bodyTags: Optional[List[NameEntry]] = None


@router.get("", response_model=List[TactonAggregateResponse])
async def list_tactons(tactons: TactonService = Depends(get_tacton_service)):
    """All tactons with their motor positions, tags and body tags."""
    return await tactons.list_aggregates()


@router.get("/own", response_model=List[TactonAggregateResponse])
async def list_own_tactons(
    user: ActingUser = Depends(get_acting_user),
    tactons: TactonService = Depends(get_tacton_service),
):
    return await tactons.list_owned(user)


@router.get("/search/{term}", response_model=List[TactonAggregateResponse])
async def search_tactons(term: str, tactons: TactonService = Depends(get_tacton_service)):
    """Case-insensitive search in title and description."""
    return await tactons.search(term)


@router.get("/{tacton_id}", response_model=TactonAggregateResponse)
async def get_tacton(tacton_id: str, tactons: TactonService = Depends(get_tacton_service)):
    return await tactons.get_aggregate(tacton_id)


@router.post("", response_model=TactonResponse, status_code=status.HTTP_201_CREATED)
async def create_tacton(
    data: CreateTactonRequest,
    user: ActingUser = Depends(get_acting_user),
    tactons: TactonService = Depends(get_tacton_service),
):
    """
    Create a tacton together with its motor positions, tags and body tags.

    Positions are accepted either as `positions: [{x, y, z}]` or as the
    three arrays `xs`, `ys`, `zs`; existing tags and position sets are reused.
    """
    return await tactons.create_tacton(data.model_dump(exclude_none=True), user)


@router.patch("/{tacton_id}", response_model=TactonResponse)
async def update_tacton(
    tacton_id: str,
    data: UpdateTactonRequest,
    user: ActingUser = Depends(get_acting_user),
    tactons: TactonService = Depends(get_tacton_service),
):
    """Partial update; fields left out keep their stored value."""
    return await tactons.update_tacton(tacton_id, data.model_dump(exclude_unset=True, exclude_none=True), user)


@router.delete("/{tacton_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tacton(
    tacton_id: str,
    user: ActingUser = Depends(get_acting_user),
    tactons: TactonService = Depends(get_tacton_service),
) -> None:
    # deleting an absent tacton is still a success
    await tactons.delete_tacton(tacton_id, user)


@router.post("/{tacton_id}/links", status_code=status.HTTP_201_CREATED)
async def add_links(
    tacton_id: str,
    data: LinkRequest,
    user: ActingUser = Depends(get_acting_user),
    tactons: TactonService = Depends(get_tacton_service),
):
    """Link tags / body tags by name, creating unknown names. Idempotent."""
    await tactons.add_links(tacton_id, _entries(data.tags), _entries(data.bodyTags), user)
    return Response(status_code=status.HTTP_201_CREATED)


@router.post("/{tacton_id}/links/remove", status_code=status.HTTP_204_NO_CONTENT)
async def remove_links(
    tacton_id: str,
    data: LinkRequest,
    user: ActingUser = Depends(get_acting_user),
    tactons: TactonService = Depends(get_tacton_service),
) -> None:
    """Unlink tags / body tags by name; unknown names are ignored."""
    await tactons.remove_links(tacton_id, _entries(data.tags), _entries(data.bodyTags), user)


def _entries(entries: Optional[List[NameEntry]]) -> Optional[List[dict]]:
    if entries is None:
        return None
    return [entry.model_dump() for entry in entries]
