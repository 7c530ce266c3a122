# tactjam/api/schemas.py
"""
Request and response bodies shared by several routers.
"""
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, StrictFloat, StrictInt

# JSON numbers only; booleans and numeric strings are rejected
Coordinate = Union[StrictInt, StrictFloat]


class NameEntry(BaseModel):
    name: str


class PositionIn(BaseModel):
    # missing axes are allowed; such entries are dropped during normalization
    x: Optional[Coordinate] = None
    y: Optional[Coordinate] = None
    z: Optional[Coordinate] = None


class PositionOut(BaseModel):
    x: float
    y: float
    z: float


class MotorPositionsResponse(BaseModel):
    id: str
    positions: List[PositionOut]


class LabelResponse(BaseModel):
    id: str
    name: str
    creator_id: Optional[str] = None


class TactonResponse(BaseModel):
    id: str
    owner_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    payload_blob: str
    position_set_id: str
    last_updated_at: datetime


class TactonAggregateResponse(TactonResponse):
    motor_positions: Optional[MotorPositionsResponse] = None
    tags: List[LabelResponse] = Field(default_factory=list)
    bodyTags: List[LabelResponse] = Field(default_factory=list)


class UserProfile(BaseModel):
    id: str
    username: str
    email: str
    name: str
    created_at: datetime
    last_login_at: Optional[datetime] = None
    team_id: Optional[str] = None
    banned: bool = False
    admin: bool = False
