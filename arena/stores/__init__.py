from dataclasses import dataclass, field

from .auth_store import AuthStore
from .match_store import MatchStore
from .tournament_store import TournamentStore


@dataclass
class AppStores:
    """Stores shared by every request; created and closed by the app lifespan."""
    tournaments: TournamentStore = field(default_factory=TournamentStore)
    matches: MatchStore = field(default_factory=MatchStore)

    def close(self) -> None:
        self.tournaments.close()
        self.matches.close()


__all__ = ["AppStores", "AuthStore", "MatchStore", "TournamentStore"]
