from typing import List, Optional

from arena.schemas.tournament_schemas import TournamentRead, TournamentWithMatches
from arena.stores.base import EntityStore


class TournamentStore(EntityStore[TournamentRead]):
    """Tournament list plus the tournament currently being viewed (with its matches)."""

    @property
    def tournaments(self) -> List[TournamentRead]:
        return self.items

    @property
    def current_tournament(self) -> Optional[TournamentWithMatches]:
        return self.current

    def upcoming(self) -> List[TournamentRead]:
        return [t for t in self.items if t.status == "upcoming"]
