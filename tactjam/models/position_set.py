from typing import List
from beanie import Document, Indexed
from pydantic import Field

from tactjam.db import schema


class PositionSet(Document):
    """
    Column-oriented motor positions. Value-like: looked up by fingerprint,
    never updated in place, shared by any number of tactons.
    """
    id: str = Field(default_factory=schema.new_id)
    xs: List[float] = Field(default_factory=list)
    ys: List[float] = Field(default_factory=list)
    zs: List[float] = Field(default_factory=list)
    fingerprint: Indexed(str, unique=True)

    class Settings:
        name = schema.POSITION_SETS
