from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

from .match_schemas import MatchWithPlayers

class TournamentStatus(str, Enum):
    UPCOMING = "upcoming"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class TournamentBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    game_type: str = Field(..., min_length=1) # e.g. "valorant", "fifa"
    entry_fee: float = Field(0, ge=0)
    prize_pool: float = Field(0, ge=0)
    max_players: int = Field(..., gt=0)
    start_time: datetime
    status: TournamentStatus = TournamentStatus.UPCOMING

    class Config:
        use_enum_values = True

class TournamentCreate(TournamentBase):
    pass

class TournamentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    game_type: Optional[str] = None
    entry_fee: Optional[float] = Field(None, ge=0)
    prize_pool: Optional[float] = Field(None, ge=0)
    max_players: Optional[int] = Field(None, gt=0)
    current_players: Optional[int] = Field(None, ge=0)
    start_time: Optional[datetime] = None
    status: Optional[TournamentStatus] = None

    class Config:
        use_enum_values = True

class TournamentRead(TournamentBase):
    id: str
    current_players: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        use_enum_values = True

class TournamentWithMatches(TournamentRead):
    matches: List[MatchWithPlayers] = []
