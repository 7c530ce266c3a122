"""
Services - the tacton composition core and the user accounts it relies on.
"""
from .permissions import ActingUser
from .resolver import NameResolver, PositionSetResolver, ReferenceKind, Resolution
from .links import LinkReconciler
from .tactons import TactonService
from .teams import TeamService
from .users import UserService

__all__ = [
    "ActingUser",
    "NameResolver",
    "PositionSetResolver",
    "ReferenceKind",
    "Resolution",
    "LinkReconciler",
    "TactonService",
    "TeamService",
    "UserService",
]
