"""
Match generation endpoints.

POST /tournaments/{id}/generate runs the match generator on the enrolled
roster and replaces the stored matches. GET /tournaments/{id}/matches reads
them back in bracket order (column, row).
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlmodel import Session, select

from tourney.database import get_session
from tourney.models.match import Match
from tourney.routes.tournaments import get_tournament_or_404
from tourney.security import require_admin
from tourney.services.match_generation import generate_matches
from tourney.services.match_persistence import load_team_entries, replace_tournament_matches, tournament_descriptor

logger = logging.getLogger(__name__)

router = APIRouter()


class MatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    team1_id: Optional[int] = None
    team2_id: Optional[int] = None
    date: datetime
    row: int
    column: int


class GenerateResponse(BaseModel):
    tournament_id: int
    type: str
    capacity: int
    matches: List[MatchResponse]


@router.post(
    "/tournaments/{tournament_id}/generate",
    response_model=GenerateResponse,
    dependencies=[Depends(require_admin)],
)
def generate_tournament_matches(tournament_id: int, session: Session = Depends(get_session)):
    """
    Generate the initial matches of a tournament.

    Existing matches are wiped first, so regenerating is idempotent.
    Unsupported formats store nothing and report capacity = max_teams.
    """
    tournament = get_tournament_or_404(session, tournament_id)
    teams = load_team_entries(session, tournament_id)

    result = generate_matches(tournament_descriptor(tournament), teams)

    try:
        stored = replace_tournament_matches(session, tournament_id, result)
        session.commit()
    except Exception as e:
        session.rollback()
        logger.exception("Match generation failed for tournament %d", tournament_id)
        raise HTTPException(status_code=500, detail=f"Failed to store generated matches: {str(e)}")

    logger.info(
        "Generated %d matches for tournament %d (%s, %d teams)",
        len(stored),
        tournament_id,
        tournament.type,
        len(teams),
    )
    return GenerateResponse(
        tournament_id=tournament_id,
        type=tournament.type,
        capacity=result.capacity,
        matches=[MatchResponse.model_validate(m) for m in stored],
    )


@router.get("/tournaments/{tournament_id}/matches", response_model=List[MatchResponse])
def list_tournament_matches(tournament_id: int, session: Session = Depends(get_session)):
    """Stored matches ordered by column, then row"""
    get_tournament_or_404(session, tournament_id)
    return session.exec(
        select(Match).where(Match.tournament_id == tournament_id).order_by(Match.column, Match.row)
    ).all()
