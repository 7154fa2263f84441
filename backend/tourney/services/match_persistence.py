"""
Match persistence: roster loading and storage of generated matches.

The generator itself is pure (see match_generation); this module is the
boundary that feeds it from the database and writes its output back.
"""
import logging
from typing import List

from sqlmodel import Session, select

from tourney.models.match import Match
from tourney.models.tournament import Tournament
from tourney.models.tournament_team import TournamentTeam
from tourney.services.match_generation import ScheduleResult, TeamEntry, TournamentDescriptor

logger = logging.getLogger(__name__)


def tournament_descriptor(tournament: Tournament) -> TournamentDescriptor:
    """Read-only snapshot of the fields the generator needs."""
    return TournamentDescriptor(type=tournament.type, max_teams=tournament.max_teams, start_date=tournament.start_date)


def load_team_entries(session: Session, tournament_id: int) -> List[TeamEntry]:
    """Enrolled roster for a tournament, ordered by team_number then enrollment id."""
    rows = session.exec(
        select(TournamentTeam)
        .where(TournamentTeam.tournament_id == tournament_id)
        .order_by(TournamentTeam.team_number, TournamentTeam.id)
    ).all()
    return [TeamEntry(team_id=row.team_id, team_number=row.team_number) for row in rows]


def wipe_matches_for_tournament(session: Session, tournament_id: int) -> int:
    """Delete every stored match of a tournament. Returns the number deleted."""
    existing = session.exec(select(Match).where(Match.tournament_id == tournament_id)).all()
    for match in existing:
        session.delete(match)

    # Flush so the (tournament_id, column, row) slots are free before re-insert
    session.flush()
    return len(existing)


def replace_tournament_matches(session: Session, tournament_id: int, result: ScheduleResult) -> List[Match]:
    """
    Replace a tournament's stored matches with a freshly generated schedule.

    Matches are inserted in result order. Idempotent: the same result always
    leaves the same (team1, team2, row, column) set behind.
    Does not commit; the caller owns the transaction.
    """
    deleted = wipe_matches_for_tournament(session, tournament_id)

    stored: List[Match] = []
    for generated in result.matches:
        match = Match(
            tournament_id=tournament_id,
            team1_id=generated.team1_id,
            team2_id=generated.team2_id,
            date=generated.date,
            row=generated.row,
            column=generated.column,
        )
        session.add(match)
        stored.append(match)

    session.flush()
    logger.info(
        "Tournament %d: replaced %d matches with %d generated (capacity %d)",
        tournament_id,
        deleted,
        len(stored),
        result.capacity,
    )
    return stored
