"""Betting round state machine for no-limit hold'em."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Set
from .errors import IllegalAction
from .player import Player


class GamePhase(Enum):
    WAITING = "waiting"
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"


BETTING_PHASES = (GamePhase.PREFLOP, GamePhase.FLOP, GamePhase.TURN, GamePhase.RIVER)

# phase -> (next phase, community cards dealt on entering it)
NEXT_STREET = {
    GamePhase.PREFLOP: (GamePhase.FLOP, 3),
    GamePhase.FLOP: (GamePhase.TURN, 1),
    GamePhase.TURN: (GamePhase.RIVER, 1),
}


class ActionType(Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"
    ALL_IN = "all_in"


@dataclass
class Action:
    player_id: str
    action_type: ActionType
    amount: int = 0
    phase: str = ""
    turn_id: Optional[int] = None
    timed_out: bool = False

    def to_dict(self) -> dict:
        return {
            'player': self.player_id,
            'action': self.action_type.value,
            'amount': self.amount,
            'phase': self.phase,
            'timed_out': self.timed_out
        }


@dataclass(frozen=True)
class ResolvedAction:
    """A validated action, ready to apply. chips is what leaves the stack."""
    action_type: ActionType
    chips: int
    total: int  # player's round contribution afterwards


class BettingRound:
    """One street of betting.

    pending holds the players who still owe a response; acted holds the
    players who have acted since the last full bet or raise and therefore
    may not re-raise over a short all-in.
    """

    def __init__(self, phase: GamePhase, players: List[Player], big_blind: int,
                 start_after_seat: int, current_bet: int = 0):
        self.phase = phase
        self.players = sorted(players, key=lambda p: p.seat)
        self.big_blind = big_blind
        self.current_bet = current_bet
        self.min_raise = big_blind  # last full bet/raise increment
        self.last_aggressor: Optional[str] = None
        self.pending: Set[str] = {p.id for p in self.players if p.can_act}
        self.acted: Set[str] = set()
        self.actor: Optional[Player] = self._next_actor(start_after_seat)

    @property
    def min_raise_to(self) -> int:
        if self.current_bet == 0:
            return self.big_blind
        return self.current_bet + self.min_raise

    def _clockwise_from(self, seat: int) -> List[Player]:
        """Players ordered clockwise, starting with the first seat after `seat`."""
        return sorted(self.players, key=lambda p: (p.seat <= seat, p.seat))

    def _next_actor(self, after_seat: int) -> Optional[Player]:
        if self.is_complete():
            return None
        for player in self._clockwise_from(after_seat):
            if player.can_act and player.id in self.pending:
                return player
        return None

    def is_complete(self) -> bool:
        able = [p for p in self.players if p.can_act]
        if not any(p.id in self.pending for p in able):
            return True
        # Nobody left to bet against
        if len(able) <= 1 and all(p.current_bet >= self.current_bet for p in able):
            return True
        return False

    def can_raise(self, player: Player) -> bool:
        return player.id not in self.acted

    def legal_actions(self, player: Player) -> List[dict]:
        """Get valid actions for the player on turn."""
        if player is not self.actor:
            return []

        actions = [{'action': 'fold'}]
        to_call = self.current_bet - player.current_bet
        max_total = player.current_bet + player.stack

        if to_call <= 0:
            actions.append({'action': 'check'})
        else:
            actions.append({'action': 'call', 'amount': min(to_call, player.stack)})

        if self.current_bet == 0:
            if player.stack > 0:
                actions.append({
                    'action': 'bet',
                    'min': min(self.big_blind, max_total),
                    'max': max_total
                })
        elif self.can_raise(player) and max_total > self.current_bet:
            actions.append({
                'action': 'raise',
                'min': min(self.min_raise_to, max_total),
                'max': max_total
            })

        if player.stack > 0:
            actions.append({'action': 'all_in', 'amount': max_total})

        return actions

    def resolve(self, player: Player, action: ActionType, amount: Optional[int] = None) -> ResolvedAction:
        """Validate an action without changing any state."""
        if player is not self.actor:
            raise IllegalAction("Not your turn")

        to_call = self.current_bet - player.current_bet
        max_total = player.current_bet + player.stack

        if action == ActionType.FOLD:
            return ResolvedAction(ActionType.FOLD, 0, player.current_bet)

        if action == ActionType.CHECK:
            if to_call > 0:
                raise IllegalAction("Cannot check, must call or raise")
            return ResolvedAction(ActionType.CHECK, 0, player.current_bet)

        if action == ActionType.CALL:
            if to_call <= 0:
                raise IllegalAction("Nothing to call")
            if to_call >= player.stack:
                return ResolvedAction(ActionType.ALL_IN, player.stack, max_total)
            return ResolvedAction(ActionType.CALL, to_call, self.current_bet)

        if action == ActionType.ALL_IN:
            if player.stack == 0:
                raise IllegalAction("No chips left")
            return ResolvedAction(ActionType.ALL_IN, player.stack, max_total)

        if action == ActionType.BET and self.current_bet > 0:
            raise IllegalAction("Cannot bet, there is already a bet")
        if action == ActionType.RAISE:
            if self.current_bet == 0:
                raise IllegalAction("Nothing to raise, bet instead")
            if not self.can_raise(player):
                raise IllegalAction("Betting was not reopened, call or fold")

        if amount is None or isinstance(amount, bool) or not isinstance(amount, int):
            raise IllegalAction(f"Amount required for {action.value}")

        # Anything reaching the full stack is an all-in
        if amount >= max_total:
            return ResolvedAction(ActionType.ALL_IN, player.stack, max_total)
        if amount <= self.current_bet:
            raise IllegalAction(f"Raise must exceed current bet of {self.current_bet}")
        if amount < self.min_raise_to:
            if action == ActionType.BET:
                raise IllegalAction(f"Minimum bet is {self.min_raise_to}")
            raise IllegalAction(f"Minimum raise to {self.min_raise_to}")

        return ResolvedAction(action, amount - player.current_bet, amount)

    def apply(self, player: Player):
        """Record that the actor has acted; chips are already committed."""
        self.pending.discard(player.id)
        self.acted.add(player.id)

        if player.current_bet > self.current_bet:
            increment = player.current_bet - self.current_bet
            self.current_bet = player.current_bet
            others = [p for p in self.players if p.can_act and p is not player]
            if increment >= self.min_raise:
                self.min_raise = increment
                self.last_aggressor = player.id
                self.acted = {player.id}
                self.pending = {p.id for p in others}
            else:
                # Short all-in: players behind must respond, no reopening
                self.pending |= {p.id for p in others if p.current_bet < self.current_bet}

        self.actor = self._next_actor(player.seat)
