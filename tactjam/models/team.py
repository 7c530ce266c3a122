from typing import Optional
from beanie import Document, Indexed
from pydantic import Field

from tactjam.db import schema


class Team(Document):
    """Named group a user may belong to."""
    id: str = Field(default_factory=schema.new_id)
    name: Indexed(str, unique=True)
    creator_id: Optional[str] = None

    class Settings:
        name = schema.TEAMS
