# tactjam/api/users.py
"""
User account management: admin lookup and removal, profile edits,
password changes.
"""
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import AliasChoices, BaseModel, Field

from tactjam.services import ActingUser, UserService
from tactjam.services.users import public_profile
from .deps import get_acting_user, get_user_service
from .schemas import UserProfile

router = APIRouter(prefix="/api/users", tags=["Users"])


class ProfileUpdateRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    team_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("team_id", "teamId"))


class PasswordChangeRequest(BaseModel):
    oldPassword: str
    newPassword: str


@router.patch("/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    data: PasswordChangeRequest,
    user: ActingUser = Depends(get_acting_user),
    users: UserService = Depends(get_user_service),
) -> None:
    await users.change_password(data.oldPassword, data.newPassword, user)


@router.get("/{user_id}", response_model=UserProfile)
async def get_user(
    user_id: str,
    user: ActingUser = Depends(get_acting_user),
    users: UserService = Depends(get_user_service),
):
    """Admins only."""
    return public_profile(await users.get_profile(user_id, user))


@router.put("/{user_id}", response_model=UserProfile)
async def update_user(
    user_id: str,
    data: ProfileUpdateRequest,
    user: ActingUser = Depends(get_acting_user),
    users: UserService = Depends(get_user_service),
):
    """Profile update by the user themselves or an admin; omitted fields stay."""
    row = await users.update_profile(user_id, data.model_dump(exclude_none=True), user)
    return public_profile(row)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    user: ActingUser = Depends(get_acting_user),
    users: UserService = Depends(get_user_service),
) -> None:
    # tactons of the removed user stay, without an owner
    await users.delete_user(user_id, user)
