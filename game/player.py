"""Seated player state."""

from dataclasses import dataclass, field
from typing import List
from .poker import Card


@dataclass
class Player:
    id: str
    name: str
    seat: int
    stack: int = 0
    hole_cards: List[Card] = field(default_factory=list)
    current_bet: int = 0  # Bet in current betting round
    total_bet: int = 0    # Total bet in current hand (for side pots)
    is_folded: bool = False
    is_all_in: bool = False
    is_sitting_out: bool = False
    is_disconnected: bool = False
    leave_pending: bool = False
    missed_turns: int = 0

    def reset_for_hand(self):
        self.hole_cards = []
        self.current_bet = 0
        self.total_bet = 0
        self.is_folded = False
        self.is_all_in = False

    @property
    def in_hand(self) -> bool:
        """Dealt into the current hand and not folded."""
        return bool(self.hole_cards) and not self.is_folded

    @property
    def can_act(self) -> bool:
        return self.in_hand and not self.is_all_in
