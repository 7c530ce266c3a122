# tactjam/services/permissions.py
"""
Acting-user context and ownership checks.

The authentication layer builds an ActingUser once per request; the
services below trust it.
"""
from dataclasses import dataclass
from typing import Optional

from tactjam.core.exceptions import PermissionDeniedError


@dataclass(frozen=True)
class ActingUser:
    id: str
    username: str = ""
    admin: bool = False


def require_user(user: Optional[ActingUser]) -> ActingUser:
    if user is None:
        raise PermissionDeniedError("No user found")
    return user


def require_owner_or_admin(user: Optional[ActingUser], owner_id: Optional[str]) -> ActingUser:
    """Admins may touch anything; everyone else only what they own."""
    user = require_user(user)
    if user.admin:
        return user
    if owner_id is None or owner_id != user.id:
        raise PermissionDeniedError()
    return user


def require_admin(user: Optional[ActingUser]) -> ActingUser:
    user = require_user(user)
    if not user.admin:
        raise PermissionDeniedError()
    return user
