# tactjam/api/motor_positions.py
"""
Motor position set routes.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel

from tactjam.db.store import DataStore
from tactjam.services import ActingUser, PositionSetResolver
from tactjam.services.coordinates import normalize, parse_query, to_output
from .deps import get_acting_user, get_store
from .schemas import Coordinate, MotorPositionsResponse, PositionIn

router = APIRouter(prefix="/api/motor-positions", tags=["Motor Positions"])


class PositionSetRequest(BaseModel):
    positions: Optional[List[PositionIn]] = None
    xs: Optional[List[Coordinate]] = None
    ys: Optional[List[Coordinate]] = None
    zs: Optional[List[Coordinate]] = None


def get_position_resolver(store: DataStore = Depends(get_store)) -> PositionSetResolver:
    return PositionSetResolver(store)


@router.get("", response_model=List[MotorPositionsResponse])
async def find_position_set(
    x: Optional[str] = Query(None, description="Comma separated x values"),
    y: Optional[str] = Query(None, description="Comma separated y values"),
    z: Optional[str] = Query(None, description="Comma separated z values"),
    positions: PositionSetResolver = Depends(get_position_resolver),
):
    """Lookup only: the stored set with exactly these coordinates, if any."""
    row = await positions.lookup(parse_query(x, y, z))
    return [to_output(row)] if row else []


@router.get("/{position_set_id}", response_model=MotorPositionsResponse)
async def get_position_set(position_set_id: str, positions: PositionSetResolver = Depends(get_position_resolver)):
    return to_output(await positions.get(position_set_id))


@router.post("", response_model=MotorPositionsResponse)
async def resolve_position_set(
    data: PositionSetRequest,
    response: Response,
    user: ActingUser = Depends(get_acting_user),
    positions: PositionSetResolver = Depends(get_position_resolver),
):
    """Return the matching position set, creating it when absent (201)."""
    resolution = await positions.resolve(normalize(data.model_dump(exclude_none=True)))
    response.status_code = status.HTTP_201_CREATED if resolution.created else status.HTTP_200_OK
    return to_output(resolution.row)
