from typing import Optional
from beanie import Document, Indexed
from pydantic import Field

from tactjam.db import schema


class Tag(Document):
    id: str = Field(default_factory=schema.new_id)
    name: Indexed(str, unique=True)
    creator_id: Optional[str] = None

    class Settings:
        name = schema.TAGS


class BodyTag(Document):
    """Body location label; namespaced apart from free-text tags."""
    id: str = Field(default_factory=schema.new_id)
    name: Indexed(str, unique=True)
    creator_id: Optional[str] = None

    class Settings:
        name = schema.BODY_TAGS
