from datetime import datetime, timezone
from typing import Optional
from beanie import Document, Indexed
from pydantic import Field
from pymongo import ASCENDING, IndexModel

from tactjam.db import schema


class Tacton(Document):
    """A user-authored vibration pattern bound to one position set."""
    id: str = Field(default_factory=schema.new_id)
    owner_id: Optional[Indexed(str)] = None
    title: str
    description: Optional[str] = None
    payload_blob: str
    position_set_id: str
    last_updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = schema.TACTONS


class TactonTagLink(Document):
    id: str = Field(default_factory=schema.new_id)
    tacton_id: str
    tag_id: str

    class Settings:
        name = schema.TACTON_TAG_LINKS
        indexes = [
            IndexModel([("tacton_id", ASCENDING), ("tag_id", ASCENDING)], unique=True),
        ]


class TactonBodyTagLink(Document):
    id: str = Field(default_factory=schema.new_id)
    tacton_id: str
    bodytag_id: str

    class Settings:
        name = schema.TACTON_BODYTAG_LINKS
        indexes = [
            IndexModel([("tacton_id", ASCENDING), ("bodytag_id", ASCENDING)], unique=True),
        ]
