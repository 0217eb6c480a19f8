from typing import List, Optional

from arena.schemas.match_schemas import MatchRead, MatchWithPlayers
from arena.stores.base import EntityStore


class MatchStore(EntityStore[MatchRead]):

    @property
    def matches(self) -> List[MatchRead]:
        return self.items

    @property
    def current_match(self) -> Optional[MatchWithPlayers]:
        return self.current

    def for_player(self, user_id: str) -> List[MatchRead]:
        return [m for m in self.items if user_id in (m.player1_id, m.player2_id)]
