"""Pydantic models for the table engine wire protocol."""

from typing import List, Optional, Any, Dict
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits the client's camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Snapshot(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TableSettings(BaseModel):
    small_blind: int = Field(default=1, ge=1)
    big_blind: int = Field(default=2, ge=1)
    min_buy_in: int = Field(default=40, ge=1)
    max_buy_in: int = Field(default=200, ge=1)
    max_seats: int = Field(default=9, ge=2, le=10)
    action_timeout: float = Field(default=30.0, gt=0)
    disconnect_grace: float = Field(default=0.0, ge=0)
    max_missed_turns: int = Field(default=2, ge=1)
    rake_percent: float = Field(default=0.0, ge=0, le=100)
    rake_cap: int = Field(default=0, ge=0)

    @model_validator(mode='after')
    def check_limits(self) -> 'TableSettings':
        if self.big_blind < self.small_blind:
            raise ValueError("big_blind must be at least small_blind")
        if self.max_buy_in < self.min_buy_in:
            raise ValueError("max_buy_in must be at least min_buy_in")
        return self


# Outbound snapshot

class PlayerView(Snapshot):
    id: str
    name: str
    chips: int
    position: int
    cards: Optional[List[str]] = None
    bet: int = 0
    folded: bool = False
    all_in: bool = False
    sitting_out: bool = False
    disconnected: bool = False
    is_dealer: bool = False
    is_small_blind: bool = False
    is_big_blind: bool = False
    is_turn: bool = False


class PotView(Snapshot):
    amount: int
    eligible_players: List[str]


class ValidAction(Snapshot):
    action: str
    amount: Optional[int] = None
    min: Optional[int] = None
    max: Optional[int] = None


class WinnerSummary(Snapshot):
    player_id: str
    hand: str
    amount: int


class GameState(Snapshot):
    table_id: str
    hand_number: int
    phase: str
    players: List[PlayerView]
    community_cards: List[str]
    pot: int
    pots: List[PotView] = []
    current_bet: int = 0
    min_raise: int = 0
    turn_timer: Optional[int] = None
    turn_id: int = 0
    valid_actions: Optional[List[ValidAction]] = None
    winner: Optional[WinnerSummary] = None
    winners: Optional[List[WinnerSummary]] = None


# Inbound messages

class WebSocketMessage(BaseModel):
    type: str
    data: Optional[Dict[str, Any]] = None


class TableRequest(CamelModel):
    table_id: str = Field(min_length=1)


class JoinTableRequest(TableRequest):
    buy_in: Optional[int] = Field(default=None, ge=1)
    seat: Optional[int] = Field(default=None, ge=0)


class PlayerActionRequest(TableRequest):
    action: str  # fold, check, call, bet, raise, all_in
    amount: Optional[int] = None
    turn_id: Optional[int] = None


class AddChipsRequest(TableRequest):
    amount: int = Field(gt=0)
