from tourney.models.match import Match
from tourney.models.team import Team
from tourney.models.tournament import Tournament
from tourney.models.tournament_team import TournamentTeam
from tourney.models.user import AccessToken, User

__all__ = [
    "Tournament",
    "Team",
    "TournamentTeam",
    "Match",
    "User",
    "AccessToken",
]
