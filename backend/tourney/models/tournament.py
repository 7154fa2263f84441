from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tourney.models.match import Match
    from tourney.models.tournament_team import TournamentTeam


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    type: str = Field(index=True)  # "ROUND_ROBIN" | "SINGLE_ELIMINATION" | anything else (no matches)
    max_teams: int  # Organizer capacity, echoed back for unsupported formats
    start_date: datetime  # Default date of every generated match
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    entries: List["TournamentTeam"] = Relationship(back_populates="tournament")
    matches: List["Match"] = Relationship(back_populates="tournament")
