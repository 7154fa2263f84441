from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from tourney.models.team import Team
    from tourney.models.tournament import Tournament


class TournamentTeam(SQLModel, table=True):
    __table_args__ = (
        # A team enters a tournament at most once
        SAUniqueConstraint("tournament_id", "team_id", name="uq_tournament_team"),
        # Seeds are unique within a tournament
        SAUniqueConstraint("tournament_id", "team_number", name="uq_tournament_team_number"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    team_id: int = Field(foreign_key="team.id", index=True)
    team_number: int  # 1-based seed; match generation orders entrants by it
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="entries")
    team: "Team" = Relationship(back_populates="entries")
