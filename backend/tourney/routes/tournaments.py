from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session, func, select

from tourney.database import get_session
from tourney.models.match import Match
from tourney.models.team import Team
from tourney.models.tournament import Tournament
from tourney.models.tournament_team import TournamentTeam
from tourney.security import require_admin

router = APIRouter()


def _normalize_type(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("type is required")
    return v.strip().upper()


class TournamentCreate(BaseModel):
    name: str
    type: str
    max_teams: int
    start_date: datetime

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return _normalize_type(v)

    @field_validator("max_teams")
    @classmethod
    def validate_max_teams(cls, v):
        if v < 2:
            raise ValueError("max_teams must be >= 2")
        return v


class TournamentUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    max_teams: Optional[int] = None
    start_date: Optional[datetime] = None

    # Omitted fields keep their value; an explicit null would hit a NOT NULL column
    @field_validator("name", "type", "max_teams", "start_date", mode="before")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("name is required")
        return v.strip()

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        return _normalize_type(v)

    @field_validator("max_teams")
    @classmethod
    def validate_max_teams(cls, v):
        if v < 2:
            raise ValueError("max_teams must be >= 2")
        return v


class TournamentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    max_teams: int
    start_date: datetime
    created_at: datetime
    updated_at: datetime


class EntryCreate(BaseModel):
    team_id: int
    team_number: Optional[int] = None  # Defaults to the next free number

    @field_validator("team_number")
    @classmethod
    def validate_team_number(cls, v):
        if v is not None and v < 1:
            raise ValueError("team_number must be >= 1")
        return v


class EntryResponse(BaseModel):
    id: int
    tournament_id: int
    team_id: int
    team_name: str
    team_number: int


def get_tournament_or_404(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return tournament


def _entry_response(entry: TournamentTeam, team: Team) -> EntryResponse:
    return EntryResponse(
        id=entry.id,
        tournament_id=entry.tournament_id,
        team_id=entry.team_id,
        team_name=team.name,
        team_number=entry.team_number,
    )


@router.get("/tournaments", response_model=List[TournamentResponse])
def list_tournaments(session: Session = Depends(get_session)):
    """List all tournaments"""
    return session.exec(select(Tournament).order_by(Tournament.id)).all()


@router.post(
    "/tournaments", response_model=TournamentResponse, status_code=201, dependencies=[Depends(require_admin)]
)
def create_tournament(tournament_data: TournamentCreate, session: Session = Depends(get_session)):
    """Create a new tournament"""
    tournament = Tournament(**tournament_data.model_dump())
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament


@router.get("/tournaments/{tournament_id}", response_model=TournamentResponse)
def get_tournament(tournament_id: int, session: Session = Depends(get_session)):
    """Get a tournament by ID"""
    return get_tournament_or_404(session, tournament_id)


@router.put("/tournaments/{tournament_id}", response_model=TournamentResponse, dependencies=[Depends(require_admin)])
def update_tournament(tournament_id: int, tournament_data: TournamentUpdate, session: Session = Depends(get_session)):
    """Update a tournament. Stored matches are left as-is until the next generate."""
    tournament = get_tournament_or_404(session, tournament_id)

    update_data = tournament_data.model_dump(exclude_unset=True)
    if "max_teams" in update_data:
        enrolled = session.exec(
            select(func.count()).select_from(TournamentTeam).where(TournamentTeam.tournament_id == tournament_id)
        ).one()
        if update_data["max_teams"] < enrolled:
            raise HTTPException(
                status_code=409,
                detail=f"max_teams ({update_data['max_teams']}) is below the {enrolled} teams already enrolled",
            )

    for field, value in update_data.items():
        setattr(tournament, field, value)

    tournament.updated_at = datetime.utcnow()
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament


@router.delete("/tournaments/{tournament_id}", status_code=204, dependencies=[Depends(require_admin)])
def delete_tournament(tournament_id: int, session: Session = Depends(get_session)):
    """Delete a tournament with its enrollments and matches"""
    tournament = get_tournament_or_404(session, tournament_id)

    try:
        # Children first (FK order): matches, entries, then the tournament
        for match in session.exec(select(Match).where(Match.tournament_id == tournament_id)).all():
            session.delete(match)
        for entry in session.exec(select(TournamentTeam).where(TournamentTeam.tournament_id == tournament_id)).all():
            session.delete(entry)
        session.flush()

        session.delete(tournament)
        session.commit()
    except Exception as e:
        session.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to delete tournament: {str(e)}")


# ============================================================================
# Enrollment
# ============================================================================


@router.get("/tournaments/{tournament_id}/teams", response_model=List[EntryResponse])
def list_tournament_teams(tournament_id: int, session: Session = Depends(get_session)):
    """Enrolled teams ordered by team_number"""
    get_tournament_or_404(session, tournament_id)

    rows = session.exec(
        select(TournamentTeam, Team)
        .join(Team, TournamentTeam.team_id == Team.id)
        .where(TournamentTeam.tournament_id == tournament_id)
        .order_by(TournamentTeam.team_number, TournamentTeam.id)
    ).all()
    return [_entry_response(entry, team) for entry, team in rows]


@router.post(
    "/tournaments/{tournament_id}/teams",
    response_model=EntryResponse,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
def enroll_team(tournament_id: int, request: EntryCreate, session: Session = Depends(get_session)):
    """
    Enroll a team in a tournament.

    Constraints:
    - the tournament holds at most max_teams teams
    - (tournament_id, team_id) and (tournament_id, team_number) are unique
    """
    tournament = get_tournament_or_404(session, tournament_id)

    team = session.get(Team, request.team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")

    entries = session.exec(select(TournamentTeam).where(TournamentTeam.tournament_id == tournament_id)).all()

    if any(e.team_id == team.id for e in entries):
        raise HTTPException(status_code=409, detail=f"Team {team.id} is already enrolled in this tournament")
    if len(entries) >= tournament.max_teams:
        raise HTTPException(status_code=409, detail=f"Tournament is full ({tournament.max_teams} teams)")

    team_number = request.team_number
    if team_number is None:
        team_number = max((e.team_number for e in entries), default=0) + 1
    elif any(e.team_number == team_number for e in entries):
        raise HTTPException(status_code=409, detail=f"team_number {team_number} is already taken in this tournament")

    entry = TournamentTeam(tournament_id=tournament_id, team_id=team.id, team_number=team_number)
    try:
        session.add(entry)
        session.commit()
        session.refresh(entry)
    except Exception as e:
        session.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    return _entry_response(entry, team)


@router.delete("/tournaments/{tournament_id}/teams/{team_id}", status_code=204, dependencies=[Depends(require_admin)])
def withdraw_team(tournament_id: int, team_id: int, session: Session = Depends(get_session)):
    """Remove a team from a tournament. Stored matches are not regenerated."""
    get_tournament_or_404(session, tournament_id)

    entry = session.exec(
        select(TournamentTeam).where(TournamentTeam.tournament_id == tournament_id, TournamentTeam.team_id == team_id)
    ).first()
    if not entry:
        raise HTTPException(status_code=404, detail="Team is not enrolled in this tournament")

    session.delete(entry)
    session.commit()
