# tactjam/api/auth.py
"""
Authentication routes: register, login, current user, token renewal.
"""
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from tactjam.auth.security import create_access_token
from tactjam.core.exceptions import PermissionDeniedError
from tactjam.services import ActingUser, UserService
from tactjam.services.users import public_profile
from .deps import get_acting_user, get_user_service
from .schemas import UserProfile

router = APIRouter(prefix="/api/auth", tags=["Auth"])


class RegisterRequest(BaseModel):
    username: str
    email: str
    name: str
    password: str


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserProfile


@router.post("/register", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, users: UserService = Depends(get_user_service)):
    row = await users.register(data.model_dump())
    return public_profile(row)


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, users: UserService = Depends(get_user_service)):
    row = await users.authenticate(data.username, data.password)
    return TokenResponse(access_token=create_access_token(row["id"]), user=public_profile(row))


@router.get("/me", response_model=UserProfile)
async def me(user: ActingUser = Depends(get_acting_user), users: UserService = Depends(get_user_service)):
    row = await users.get(user.id)
    if row is None:
        raise PermissionDeniedError("User authentication error")
    return public_profile(row)


@router.post("/renew", response_model=TokenResponse)
async def renew(user: ActingUser = Depends(get_acting_user), users: UserService = Depends(get_user_service)):
    """Issue a fresh token for a still-valid session."""
    row = await users.get(user.id)
    if row is None:
        raise PermissionDeniedError("User authentication error")
    return TokenResponse(access_token=create_access_token(user.id), user=public_profile(row))
