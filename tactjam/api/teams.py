# tactjam/api/teams.py
"""
Team routes. Same endpoint shape as the tag routers, except that
creating a taken name is a conflict.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from tactjam.services import ActingUser, TeamService
from .deps import get_acting_user, get_team_service

router = APIRouter(prefix="/api/teams", tags=["Teams"])


class TeamRequest(BaseModel):
    name: str


class TeamResponse(BaseModel):
    id: str
    name: str
    creator_id: Optional[str] = None


@router.get("", response_model=List[TeamResponse])
async def list_teams(teams: TeamService = Depends(get_team_service)):
    return await teams.list()


@router.get("/search/id/{team_id}", response_model=TeamResponse)
async def get_team(team_id: str, teams: TeamService = Depends(get_team_service)):
    return await teams.get(team_id)


@router.get("/search/name/{name}", response_model=TeamResponse)
async def get_team_by_name(name: str, teams: TeamService = Depends(get_team_service)):
    return await teams.get_by_name(name)


@router.post("", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    data: TeamRequest,
    user: ActingUser = Depends(get_acting_user),
    teams: TeamService = Depends(get_team_service),
):
    return await teams.create(data.name, user)


@router.patch("/{team_id}", response_model=TeamResponse)
async def rename_team(
    team_id: str,
    data: TeamRequest,
    user: ActingUser = Depends(get_acting_user),
    teams: TeamService = Depends(get_team_service),
):
    return await teams.rename(team_id, data.name, user)


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(
    team_id: str,
    user: ActingUser = Depends(get_acting_user),
    teams: TeamService = Depends(get_team_service),
) -> None:
    await teams.delete(team_id, user)
