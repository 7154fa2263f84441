"""
Match Generation: initial match layout for a tournament format.

Given a tournament descriptor (format tag, max_teams, start_date) and the
enrolled roster, builds every match the format needs:

- ROUND_ROBIN: one match per unordered pair of teams. row/column are the
  sorted positions of the two teams.
- SINGLE_ELIMINATION: bracket sized to the next power of two. Column 0 pairs
  teams by sorted seed order (byes where the roster runs out); every later
  column is an empty placeholder filled by advancement.
- Anything else: no matches, capacity echoes tournament.max_teams.

Pure functions only: no session, no HTTP, the caller's roster is never reordered.
Input validation belongs to the API layer.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Protocol, Sequence, TypeVar

logger = logging.getLogger(__name__)


class TournamentType(str, Enum):
    ROUND_ROBIN = "ROUND_ROBIN"
    SINGLE_ELIMINATION = "SINGLE_ELIMINATION"


class TournamentLike(Protocol):
    """What the generator reads from a tournament (TournamentDescriptor or a Tournament row)."""

    @property
    def type(self) -> str: ...

    @property
    def max_teams(self) -> int: ...

    @property
    def start_date(self) -> datetime: ...


class TeamLike(Protocol):
    @property
    def team_id(self) -> int: ...

    @property
    def team_number(self) -> int: ...


T = TypeVar("T", bound=TeamLike)


@dataclass(frozen=True)
class TournamentDescriptor:
    type: str
    max_teams: int
    start_date: datetime


@dataclass(frozen=True)
class TeamEntry:
    team_id: int
    team_number: int


@dataclass
class GeneratedMatch:
    team1_id: Optional[int]
    team2_id: Optional[int]
    date: datetime
    row: int
    column: int


@dataclass
class ScheduleResult:
    capacity: int
    matches: List[GeneratedMatch] = field(default_factory=list)


def sort_by_team_number(teams: Sequence[T]) -> List[T]:
    """Return a new list ordered by team_number (stable: equal seeds keep input order)."""
    return sorted(teams, key=lambda entry: entry.team_number)


def bracket_capacity(team_count: int) -> int:
    """Smallest power of two >= team_count, never below 2."""
    capacity = 2
    while capacity < team_count:
        capacity *= 2
    return capacity


def generate_matches(tournament: TournamentLike, teams: Sequence[TeamLike]) -> ScheduleResult:
    """
    Dispatch on tournament.type and build the initial matches.

    tournament is usually a TournamentDescriptor; teams are usually TeamEntry values.

    Unsupported formats return no matches and capacity = tournament.max_teams.
    """
    tag = tournament.type

    if tag == TournamentType.ROUND_ROBIN:
        return generate_round_robin_matches(tournament, teams)
    elif tag == TournamentType.SINGLE_ELIMINATION:
        return generate_single_elimination_matches(tournament, teams)

    logger.warning("Unsupported tournament type %r: no matches generated", tag)
    return ScheduleResult(capacity=tournament.max_teams, matches=[])


def generate_round_robin_matches(tournament: TournamentLike, teams: Sequence[TeamLike]) -> ScheduleResult:
    """
    Every team plays every other team once.

    For sorted positions i < j: team1 = teams[i], team2 = teams[j], row = i, column = j.
    Match count: n * (n - 1) / 2. Capacity is the team count itself.
    """
    ordered = sort_by_team_number(teams)
    matches: List[GeneratedMatch] = []

    for i in range(len(ordered)):
        for j in range(i + 1, len(ordered)):
            matches.append(
                GeneratedMatch(
                    team1_id=ordered[i].team_id,
                    team2_id=ordered[j].team_id,
                    date=tournament.start_date,
                    row=i,
                    column=j,
                )
            )

    logger.debug("Round robin: %d teams -> %d matches", len(ordered), len(matches))
    return ScheduleResult(capacity=len(ordered), matches=matches)


def generate_single_elimination_matches(tournament: TournamentLike, teams: Sequence[TeamLike]) -> ScheduleResult:
    """
    Knockout bracket skeleton.

    capacity = next power of two >= team count (minimum 2).
    Column 0 has capacity/2 matches, each later column half the previous, down to 1.
    Column 0 slot i: team1 = teams[2i], team2 = teams[2i + 1] (None past the roster = bye).
    Columns >= 1 start with both sides None.
    """
    ordered = sort_by_team_number(teams)
    capacity = bracket_capacity(len(ordered))

    matches: List[GeneratedMatch] = []
    matches_in_column = capacity // 2
    column = 0

    while matches_in_column >= 1:
        for row in range(matches_in_column):
            team1_id = None
            team2_id = None

            if column == 0:
                if 2 * row < len(ordered):
                    team1_id = ordered[2 * row].team_id
                if 2 * row + 1 < len(ordered):
                    team2_id = ordered[2 * row + 1].team_id

            matches.append(
                GeneratedMatch(
                    team1_id=team1_id,
                    team2_id=team2_id,
                    date=tournament.start_date,
                    row=row,
                    column=column,
                )
            )

        column += 1
        matches_in_column //= 2

    logger.debug(
        "Single elimination: %d teams -> capacity %d, %d rounds, %d matches",
        len(ordered),
        capacity,
        column,
        len(matches),
    )
    return ScheduleResult(capacity=capacity, matches=matches)
