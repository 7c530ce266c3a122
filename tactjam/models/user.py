from datetime import datetime, timezone
from typing import Optional
from beanie import Document, Indexed
from pydantic import Field

from tactjam.db import schema


class User(Document):
    id: str = Field(default_factory=schema.new_id)
    username: Indexed(str, unique=True)
    email: Indexed(str, unique=True)
    name: str
    password: str  # bcrypt hash
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_login_at: Optional[datetime] = None
    team_id: Optional[str] = None
    banned: bool = False
    admin: bool = False

    class Settings:
        name = schema.USERS
