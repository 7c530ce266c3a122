"""
Beanie documents backing the MongoDB datastore, one per collection.
"""
from tactjam.db import schema
from .position_set import PositionSet
from .tacton import Tacton, TactonTagLink, TactonBodyTagLink
from .tag import Tag, BodyTag
from .team import Team
from .user import User

# collection name -> document class
DOCUMENTS = {
    schema.USERS: User,
    schema.TEAMS: Team,
    schema.TACTONS: Tacton,
    schema.POSITION_SETS: PositionSet,
    schema.TAGS: Tag,
    schema.BODY_TAGS: BodyTag,
    schema.TACTON_TAG_LINKS: TactonTagLink,
    schema.TACTON_BODYTAG_LINKS: TactonBodyTagLink,
}

__all__ = [
    "DOCUMENTS",
    "PositionSet",
    "Tacton",
    "TactonTagLink",
    "TactonBodyTagLink",
    "Tag",
    "BodyTag",
    "Team",
    "User",
]
