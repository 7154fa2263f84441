"""
Team Management API Routes
Provides CRUD operations for teams. Enrollment lives in the tournaments router.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session, or_, select

from tourney.database import get_session
from tourney.models.match import Match
from tourney.models.team import Team
from tourney.models.tournament_team import TournamentTeam
from tourney.security import get_current_user

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class TeamCreateRequest(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()


class TeamUpdateRequest(BaseModel):
    name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("name must not be blank")
        return v.strip() if v is not None else v


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime


def _name_taken(session: Session, name: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Team).where(Team.name == name)
    if exclude_id is not None:
        query = query.where(Team.id != exclude_id)
    return session.exec(query).first() is not None


# ============================================================================
# Team CRUD Endpoints
# ============================================================================


@router.get("/teams", response_model=List[TeamResponse])
def list_teams(session: Session = Depends(get_session)):
    """List all teams ordered by id"""
    return session.exec(select(Team).order_by(Team.id)).all()


@router.post("/teams", response_model=TeamResponse, status_code=201, dependencies=[Depends(get_current_user)])
def create_team(request: TeamCreateRequest, session: Session = Depends(get_session)):
    """
    Create a new team.

    Constraints:
    - name must be unique
    """
    if _name_taken(session, request.name):
        raise HTTPException(status_code=409, detail=f"Team with name '{request.name}' already exists")

    team = Team(name=request.name)
    try:
        session.add(team)
        session.commit()
        session.refresh(team)
        return team
    except Exception as e:
        session.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/teams/{team_id}", response_model=TeamResponse)
def get_team(team_id: int, session: Session = Depends(get_session)):
    team = session.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


@router.patch("/teams/{team_id}", response_model=TeamResponse, dependencies=[Depends(get_current_user)])
def update_team(team_id: int, request: TeamUpdateRequest, session: Session = Depends(get_session)):
    """Rename a team."""
    team = session.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")

    if request.name is not None:
        if _name_taken(session, request.name, exclude_id=team_id):
            raise HTTPException(status_code=409, detail=f"Team with name '{request.name}' already exists")
        team.name = request.name

    session.add(team)
    session.commit()
    session.refresh(team)
    return team


@router.delete("/teams/{team_id}", status_code=204, dependencies=[Depends(get_current_user)])
def delete_team(team_id: int, session: Session = Depends(get_session)):
    """
    Delete a team.

    Refused (409) while the team is enrolled in any tournament or still sits
    in a stored match (withdrawing does not regenerate matches).
    """
    team = session.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")

    enrolled = session.exec(select(TournamentTeam).where(TournamentTeam.team_id == team_id)).first()
    if enrolled:
        raise HTTPException(
            status_code=409, detail=f"Team {team_id} is enrolled in tournament {enrolled.tournament_id}"
        )

    referenced = session.exec(
        select(Match).where(or_(Match.team1_id == team_id, Match.team2_id == team_id))
    ).first()
    if referenced:
        raise HTTPException(
            status_code=409,
            detail=f"Team {team_id} appears in matches of tournament {referenced.tournament_id}; regenerate them first",
        )

    try:
        session.delete(team)
        session.commit()
    except Exception as e:
        session.rollback()
        raise HTTPException(status_code=409, detail=f"Team {team_id} is still referenced: {str(e)}")
