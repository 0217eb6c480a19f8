from pydantic import BaseModel, model_validator
from typing import Optional
from datetime import datetime
from enum import Enum

from .user_schemas import PlayerSummary

WINNER_NOT_A_PLAYER = "Winner must be one of the players in the match."

class MatchStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DISPUTED = "disputed"

class MatchBase(BaseModel):
    player1_id: Optional[str] = None
    player2_id: Optional[str] = None # None for a bye or an unfilled slot
    winner_id: Optional[str] = None
    status: MatchStatus = MatchStatus.PENDING
    score: Optional[str] = None # e.g. "2-1"

    class Config:
        use_enum_values = True

class MatchCreate(MatchBase):
    tournament_id: str

    @model_validator(mode="after")
    def winner_is_a_player(self):
        if self.winner_id is not None and self.winner_id not in (self.player1_id, self.player2_id):
            raise ValueError(WINNER_NOT_A_PLAYER)
        return self

class MatchUpdate(BaseModel):
    player1_id: Optional[str] = None
    player2_id: Optional[str] = None
    winner_id: Optional[str] = None
    status: Optional[MatchStatus] = None
    score: Optional[str] = None

    class Config:
        use_enum_values = True

class MatchRead(MatchBase):
    id: str
    tournament_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        use_enum_values = True

class MatchWithPlayers(MatchRead):
    player1: Optional[PlayerSummary] = None
    player2: Optional[PlayerSummary] = None
    winner: Optional[PlayerSummary] = None
