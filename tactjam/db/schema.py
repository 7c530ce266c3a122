# tactjam/db/schema.py
"""
Storage policy shared by every DataStore implementation.

Collections, unique keys and delete policies are declared here once;
the Beanie documents mirror the unique keys as indexes, and the in-memory
store enforces them directly.
"""
import uuid
from typing import Dict, List, Tuple

USERS = "users"
TEAMS = "teams"
TACTONS = "tactons"
POSITION_SETS = "motor_positions"
TAGS = "tags"
BODY_TAGS = "body_tags"
TACTON_TAG_LINKS = "tacton_tag_link"
TACTON_BODYTAG_LINKS = "tacton_bodytag_link"

COLLECTIONS = (
    USERS,
    TEAMS,
    TACTONS,
    POSITION_SETS,
    TAGS,
    BODY_TAGS,
    TACTON_TAG_LINKS,
    TACTON_BODYTAG_LINKS,
)

UNIQUE_KEYS: Dict[str, List[Tuple[str, ...]]] = {
    USERS: [("username",), ("email",)],
    TEAMS: [("name",)],
    POSITION_SETS: [("fingerprint",)],
    TAGS: [("name",)],
    BODY_TAGS: [("name",)],
    TACTON_TAG_LINKS: [("tacton_id", "tag_id")],
    TACTON_BODYTAG_LINKS: [("tacton_id", "bodytag_id")],
}

# parent collection -> [(child collection, foreign key field)]
# children are deleted with the parent
CASCADES: Dict[str, List[Tuple[str, str]]] = {
    TACTONS: [
        (TACTON_TAG_LINKS, "tacton_id"),
        (TACTON_BODYTAG_LINKS, "tacton_id"),
    ],
    TAGS: [(TACTON_TAG_LINKS, "tag_id")],
    BODY_TAGS: [(TACTON_BODYTAG_LINKS, "bodytag_id")],
}

# children outlive the parent; their foreign key is set to None
SET_NULL: Dict[str, List[Tuple[str, str]]] = {
    USERS: [
        (TACTONS, "owner_id"),
        (TAGS, "creator_id"),
        (BODY_TAGS, "creator_id"),
        (TEAMS, "creator_id"),
    ],
    TEAMS: [(USERS, "team_id")],
}


def new_id() -> str:
    """Row identifier assigned by the store on insert."""
    return str(uuid.uuid4())
