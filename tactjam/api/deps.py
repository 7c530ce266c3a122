# tactjam/api/deps.py
"""
Request-scoped dependencies: the datastore, the services built on it,
and the acting user taken from the bearer token.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tactjam.auth.security import decode_access_token
from tactjam.core.exceptions import DependencyError, PermissionDeniedError
from tactjam.db.store import DataStore
from tactjam.services import ActingUser, TactonService, TeamService, UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_store(request: Request) -> DataStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise DependencyError("request", "datastore not initialized")
    return store


def get_tacton_service(store: DataStore = Depends(get_store)) -> TactonService:
    return TactonService(store)


def get_user_service(store: DataStore = Depends(get_store)) -> UserService:
    return UserService(store)


def get_team_service(store: DataStore = Depends(get_store)) -> TeamService:
    return TeamService(store)


async def get_acting_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    users: UserService = Depends(get_user_service),
) -> ActingUser:
    """Every authenticated route goes through here; all failures are 401."""
    if credentials is None:
        raise PermissionDeniedError("No user found")
    user_id = decode_access_token(credentials.credentials)
    return await users.acting_user(user_id)
