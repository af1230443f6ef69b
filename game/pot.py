"""Pot bookkeeping: contributions, side pots and payouts."""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

from .errors import InsufficientChips
from .hand_evaluator import HandStrength
from .player import Player


@dataclass
class Pot:
    """Represents a pot (main or side) with eligible players."""
    amount: int = 0
    eligible_players: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'amount': self.amount,
            'eligible_players': self.eligible_players
        }


@dataclass
class PotAward:
    """How a single pot was split."""
    amount: int
    eligible_players: List[str]
    shares: Dict[str, int]

    def to_dict(self) -> dict:
        return {
            'amount': self.amount,
            'eligible_players': self.eligible_players,
            'shares': self.shares
        }


class PotManager:
    """Tracks every chip committed during one hand.

    Contributions live on the Player objects (current_bet for the round,
    total_bet for the hand). Pots are rebuilt from the hand totals whenever a
    round is swept, so side pots always reflect the final folded/all-in state.
    """

    def __init__(self):
        self.pots: List[Pot] = []
        self.rake = 0
        self._contributors: Dict[str, Player] = {}

    @property
    def contributors(self) -> List[Player]:
        return sorted(self._contributors.values(), key=lambda p: p.seat)

    @property
    def total(self) -> int:
        """All chips in the middle, swept or not."""
        return sum(p.total_bet for p in self._contributors.values()) - self.rake

    @property
    def unswept(self) -> int:
        return sum(p.current_bet for p in self._contributors.values())

    def commit(self, player: Player, amount: int) -> int:
        """Move chips from a player's stack into the current round."""
        if amount < 0:
            raise ValueError("Cannot commit a negative amount")
        if amount > player.stack:
            raise InsufficientChips(
                f"{player.name} cannot commit {amount}, only {player.stack} behind"
            )
        player.stack -= amount
        player.current_bet += amount
        player.total_bet += amount
        if player.stack == 0 and player.hole_cards:
            player.is_all_in = True
        self._contributors.setdefault(player.id, player)
        return amount

    def sweep_round(self):
        """Close the betting round: rebuild pots and clear round contributions."""
        self.pots = self._build_pots()
        for player in self._contributors.values():
            player.current_bet = 0

    def _build_pots(self) -> List[Pot]:
        """One pot per distinct contribution level of the players still in.

        Folded players' chips count toward every level they reached, but they
        are eligible for none.
        """
        contributors = self.contributors
        levels = sorted({p.total_bet for p in contributors if not p.is_folded and p.total_bet > 0})

        pots: List[Pot] = []
        prev_level = 0
        for level in levels:
            amount = sum(
                min(p.total_bet, level) - min(p.total_bet, prev_level)
                for p in contributors
            )
            eligible = [p.id for p in contributors if not p.is_folded and p.total_bet >= level]
            pots.append(Pot(amount=amount, eligible_players=eligible))
            prev_level = level

        # Folded chips above the highest live level
        leftover = sum(max(p.total_bet - prev_level, 0) for p in contributors)
        if leftover:
            if pots:
                pots[-1].amount += leftover
            else:
                pots.append(Pot(amount=leftover))

        return pots

    def take_rake(self, percent: float, cap: int = 0) -> int:
        """Remove the house fee from the pots, main pot first."""
        total = sum(p.amount for p in self.pots)
        rake = int(total * percent / 100)
        if cap:
            rake = min(rake, cap)

        remaining = rake
        for pot in self.pots:
            take = min(pot.amount, remaining)
            pot.amount -= take
            remaining -= take
        self.rake += rake
        return rake

    def award(self, rankings: Mapping[str, HandStrength], order: Sequence[str]) -> List[PotAward]:
        """Split every pot between its strongest eligible players.

        rankings: strength per player still in the hand.
        order: player ids in action order starting left of the button; odd
            chips go to tied winners earliest in this order.
        """
        position = {player_id: i for i, player_id in enumerate(order)}
        awards = []

        for pot in self.pots:
            if pot.amount == 0 or not pot.eligible_players:
                continue

            contenders = pot.eligible_players
            if len(contenders) == 1:
                winners = list(contenders)
            else:
                best = max(rankings[pid] for pid in contenders)
                winners = [pid for pid in contenders if rankings[pid] == best]
            winners.sort(key=lambda pid: position.get(pid, len(position)))

            share, remainder = divmod(pot.amount, len(winners))
            shares = {
                pid: share + (1 if i < remainder else 0)
                for i, pid in enumerate(winners)
            }
            awards.append(PotAward(
                amount=pot.amount,
                eligible_players=list(contenders),
                shares=shares
            ))

        return awards

    def refund_all(self):
        """Give every contribution of the hand back to its owner."""
        for player in self._contributors.values():
            player.stack += player.total_bet
            player.current_bet = 0
            player.total_bet = 0
            player.is_all_in = False
        self.pots = []
