"""Table and hand lifecycle for Texas Hold'em."""

import logging
import math
import time
from typing import Callable, Dict, List, Optional, Set

from models.schemas import GameState, PlayerView, PotView, ValidAction, WinnerSummary
from .betting import (
    BETTING_PHASES, NEXT_STREET, Action, ActionType, BettingRound, GamePhase, ResolvedAction
)
from .errors import CapacityExceeded, DeckExhausted, IllegalAction, InsufficientChips
from .hand_evaluator import HandEvaluator, HandStrength
from .player import Player
from .poker import Card, Deck
from .pot import PotAward, PotManager

logger = logging.getLogger(__name__)


class Table:
    def __init__(self, table_id: str, small_blind: int = 1, big_blind: int = 2,
                 min_buy_in: int = 40, max_buy_in: int = 200, max_seats: int = 9,
                 action_timeout: float = 30.0, disconnect_grace: float = 0.0,
                 max_missed_turns: int = 2, rake_percent: float = 0.0, rake_cap: int = 0,
                 clock: Callable[[], float] = time.monotonic):
        self.table_id = table_id
        self.small_blind = small_blind
        self.big_blind = big_blind
        self.min_buy_in = min_buy_in
        self.max_buy_in = max_buy_in
        self.max_seats = max_seats
        self.action_timeout = action_timeout
        self.disconnect_grace = disconnect_grace
        self.max_missed_turns = max_missed_turns
        self.rake_percent = rake_percent
        self.rake_cap = rake_cap
        self.clock = clock

        self.players: Dict[int, Player] = {}  # seat -> Player
        self.deck: Optional[Deck] = None
        self.community_cards: List[Card] = []
        self.pot_manager = PotManager()
        self.betting: Optional[BettingRound] = None

        self.phase = GamePhase.WAITING
        self.dealer_seat: Optional[int] = None
        self.small_blind_seat: Optional[int] = None
        self.big_blind_seat: Optional[int] = None
        self.action_deadline: Optional[float] = None

        self.hand_number = 0
        self.turn_id = 0
        self.version = 0  # bumped on every observable change
        self.total_rake = 0
        self.action_history: List[Action] = []
        self.revealed: Set[str] = set()
        self.last_hand_result: Optional[dict] = None
        self._hand_players: List[Player] = []

    @property
    def hand_in_progress(self) -> bool:
        return self.phase in BETTING_PHASES

    @property
    def pot(self) -> int:
        """Total pot amount, including bets not yet swept."""
        return self.pot_manager.total

    @property
    def current_bet(self) -> int:
        return self.betting.current_bet if self.betting else 0

    @property
    def actor(self) -> Optional[Player]:
        return self.betting.actor if self.betting else None

    def _touch(self):
        self.version += 1

    # Seating

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.players.values():
            if player.id == player_id:
                return player
        return None

    def _require_player(self, player_id: str) -> Player:
        player = self.get_player(player_id)
        if player is None:
            raise IllegalAction("Not seated at this table")
        return player

    def add_player(self, player_id: str, name: str, stack: int, seat: Optional[int] = None) -> Player:
        """Seat a player, or reconnect one already seated."""
        existing = self.get_player(player_id)
        if existing:
            existing.is_disconnected = False
            existing.leave_pending = False
            self._touch()
            logger.info("Table %s: %s reconnected", self.table_id, player_id)
            return existing

        if len(self.players) >= self.max_seats:
            raise CapacityExceeded(f"Table {self.table_id} is full")

        if seat is None:
            seat = next(s for s in range(self.max_seats) if s not in self.players)
        elif not 0 <= seat < self.max_seats:
            raise IllegalAction(f"Invalid seat {seat}")
        elif seat in self.players:
            raise IllegalAction(f"Seat {seat} is taken")

        stack = max(self.min_buy_in, min(stack, self.max_buy_in))
        player = Player(id=player_id, name=name, seat=seat, stack=stack)
        self.players[seat] = player
        self._touch()
        logger.info("Table %s: %s sat down at seat %d with %d", self.table_id, player_id, seat, stack)
        return player

    def leave(self, player_id: str) -> bool:
        """Remove a player. Returns False when the leave is deferred to hand end."""
        player = self._require_player(player_id)

        if self.hand_in_progress and player.in_hand:
            player.leave_pending = True
            player.is_disconnected = True
            if self.actor is player:
                self._apply(player, self.betting.resolve(player, ActionType.FOLD))
                self._progress()
            self._touch()
            return False

        del self.players[player.seat]
        self._touch()
        logger.info("Table %s: %s left", self.table_id, player_id)
        return True

    def mark_disconnected(self, player_id: str):
        player = self._require_player(player_id)
        player.is_disconnected = True
        if self.actor is player and self.action_deadline is not None:
            self.action_deadline = min(self.action_deadline, self.clock() + self.disconnect_grace)
        self._touch()

    def sit_out(self, player_id: str):
        player = self._require_player(player_id)
        player.is_sitting_out = True
        self._touch()

    def sit_in(self, player_id: str):
        player = self._require_player(player_id)
        if player.stack == 0:
            raise InsufficientChips("Add chips before sitting in")
        player.is_sitting_out = False
        player.missed_turns = 0
        self._touch()

    def add_chips(self, player_id: str, amount: int) -> int:
        """Top up a stack between hands, up to the maximum buy-in."""
        player = self._require_player(player_id)
        if self.hand_in_progress and player.hole_cards:
            raise IllegalAction("Cannot add chips during a hand")
        if amount <= 0:
            raise IllegalAction("Amount must be positive")
        added = min(amount, self.max_buy_in - player.stack)
        if added <= 0:
            raise IllegalAction(f"Stack already at maximum buy-in of {self.max_buy_in}")
        player.stack += added
        self._touch()
        return added

    def get_active_players(self) -> List[Player]:
        """Players who will be dealt into the next hand."""
        return [self.players[s] for s in sorted(self.players)
                if self._is_eligible(self.players[s])]

    @staticmethod
    def _is_eligible(player: Player) -> bool:
        return (not player.is_sitting_out and not player.leave_pending
                and not player.is_disconnected and player.stack > 0)

    def can_start_hand(self) -> bool:
        return not self.hand_in_progress and len(self.get_active_players()) >= 2

    @staticmethod
    def _clockwise(players: List[Player], after_seat: int) -> List[Player]:
        """Players ordered clockwise, starting with the first seat after after_seat."""
        return sorted(players, key=lambda p: (p.seat <= after_seat, p.seat))

    # Hand lifecycle

    def start_hand(self, seed: Optional[int] = None, deck: Optional[Deck] = None) -> bool:
        """Start a new hand. Returns False if there are not enough players."""
        if self.hand_in_progress:
            raise IllegalAction("Hand already in progress")
        active = self.get_active_players()
        if len(active) < 2:
            return False

        self.hand_number += 1
        for player in self.players.values():
            player.reset_for_hand()
        self.community_cards = []
        self.pot_manager = PotManager()
        self.action_history = []
        self.revealed = set()
        self.last_hand_result = None
        self.deck = deck if deck is not None else Deck(seed)
        self._hand_players = active

        # Move dealer button
        if self.dealer_seat is None:
            self.dealer_seat = active[0].seat
        else:
            self.dealer_seat = self._clockwise(active, self.dealer_seat)[0].seat

        # Heads-up: button is small blind
        if len(active) == 2:
            self.small_blind_seat = self.dealer_seat
        else:
            self.small_blind_seat = self._clockwise(active, self.dealer_seat)[0].seat
        self.big_blind_seat = self._clockwise(active, self.small_blind_seat)[0].seat

        # Two passes, one card each, starting left of the button
        try:
            for _ in range(2):
                for player in self._clockwise(active, self.dealer_seat):
                    player.hole_cards.append(self.deck.draw_one())
        except DeckExhausted as e:
            self._abort_hand(str(e))
            return False

        sb_player = self.players[self.small_blind_seat]
        bb_player = self.players[self.big_blind_seat]
        self.pot_manager.commit(sb_player, min(self.small_blind, sb_player.stack))
        self.pot_manager.commit(bb_player, min(self.big_blind, bb_player.stack))

        # A short big blind still sets the full amount to call
        self.phase = GamePhase.PREFLOP
        self.betting = BettingRound(
            GamePhase.PREFLOP, active, self.big_blind,
            start_after_seat=self.big_blind_seat,
            current_bet=self.big_blind
        )
        logger.info("Table %s: hand #%d started, %d players, dealer seat %d",
                    self.table_id, self.hand_number, len(active), self.dealer_seat)

        self._progress()
        self._touch()
        return True

    def _progress(self):
        """Advance turns and streets until someone has to act or the hand ends."""
        while True:
            live = [p for p in self._hand_players if p.in_hand]
            if len(live) <= 1:
                self._finish_uncontested()
                return

            betting = self.betting
            if not betting.is_complete():
                actor = betting.actor
                # Deferred leavers fold when their turn comes
                if actor.leave_pending:
                    self._apply(actor, betting.resolve(actor, ActionType.FOLD))
                    continue
                self._begin_turn(actor)
                return

            self.pot_manager.sweep_round()
            if betting.phase == GamePhase.RIVER:
                self._showdown()
                return

            next_phase, count = NEXT_STREET[betting.phase]
            try:
                self.community_cards.extend(self.deck.draw(count))
            except DeckExhausted as e:
                self._abort_hand(str(e))
                return
            self.phase = next_phase
            self.betting = BettingRound(next_phase, self._hand_players, self.big_blind,
                                        start_after_seat=self.dealer_seat)

    def _begin_turn(self, actor: Player):
        self.turn_id += 1
        timeout = self.disconnect_grace if actor.is_disconnected else self.action_timeout
        self.action_deadline = self.clock() + timeout

    def process_action(self, player_id: str, action: str, amount: Optional[int] = None,
                       turn_id: Optional[int] = None) -> Action:
        """Validate and apply a player's action. Raises IllegalAction on rejection."""
        if not self.hand_in_progress or self.betting is None:
            raise IllegalAction("No hand in progress")
        player = self._require_player(player_id)
        if turn_id is not None and turn_id != self.turn_id:
            raise IllegalAction("Stale action, turn has already passed")
        if self.actor is not player:
            raise IllegalAction("Not your turn")
        try:
            action_type = ActionType(action)
        except ValueError:
            raise IllegalAction(f"Unknown action: {action}") from None

        resolved = self.betting.resolve(player, action_type, amount)
        player.missed_turns = 0
        applied = self._apply(player, resolved)
        self._progress()
        self._touch()
        return applied

    def _apply(self, player: Player, resolved: ResolvedAction, timed_out: bool = False) -> Action:
        self.pot_manager.commit(player, resolved.chips)
        if resolved.action_type == ActionType.FOLD:
            player.is_folded = True
        self.betting.apply(player)

        if resolved.action_type == ActionType.CALL:
            amount = resolved.chips
        elif resolved.action_type in (ActionType.BET, ActionType.RAISE, ActionType.ALL_IN):
            amount = resolved.total
        else:
            amount = 0

        action = Action(
            player_id=player.id,
            action_type=resolved.action_type,
            amount=amount,
            phase=self.phase.value,
            turn_id=self.turn_id,
            timed_out=timed_out
        )
        self.action_history.append(action)
        self.action_deadline = None
        return action

    def seconds_until_deadline(self, now: Optional[float] = None) -> Optional[float]:
        if self.action_deadline is None:
            return None
        now = self.clock() if now is None else now
        return max(0.0, self.action_deadline - now)

    def apply_timeout(self, now: Optional[float] = None) -> Optional[Action]:
        """Act for the player on turn once their deadline has passed: check if legal, else fold."""
        if not self.hand_in_progress or self.action_deadline is None:
            return None
        now = self.clock() if now is None else now
        if now < self.action_deadline:
            return None

        player = self.actor
        legal = {a['action'] for a in self.betting.legal_actions(player)}
        action_type = ActionType.CHECK if 'check' in legal else ActionType.FOLD
        player.missed_turns += 1
        applied = self._apply(player, self.betting.resolve(player, action_type), timed_out=True)
        logger.info("Table %s: %s timed out, auto %s",
                    self.table_id, player.id, action_type.value)
        self._progress()
        self._touch()
        return applied

    def _showdown(self):
        """Reveal the remaining hands, rank them and pay every pot."""
        self.phase = GamePhase.SHOWDOWN
        live = [p for p in self._hand_players if p.in_hand]
        self.revealed = {p.id for p in live}
        rankings = HandEvaluator.rank_players(
            {p.id: p.hole_cards for p in live}, self.community_cards
        )
        self._settle(rankings)

    def _finish_uncontested(self):
        """Everyone else folded: the last player takes every pot unseen."""
        self.pot_manager.sweep_round()
        self.phase = GamePhase.SHOWDOWN
        self._settle({})

    def _settle(self, rankings: Dict[str, HandStrength]):
        if self.community_cards and self.rake_percent:
            self.pot_manager.take_rake(self.rake_percent, self.rake_cap)

        order = [p.id for p in self._clockwise(self._hand_players, self.dealer_seat)]
        awards = self.pot_manager.award(rankings, order)

        by_id = {p.id: p for p in self._hand_players}
        totals: Dict[str, int] = {}
        for award in awards:
            for player_id, share in award.shares.items():
                by_id[player_id].stack += share
                totals[player_id] = totals.get(player_id, 0) + share

        position = {player_id: i for i, player_id in enumerate(order)}
        winners = sorted(totals, key=lambda pid: (-totals[pid], position[pid]))
        self._end_hand(awards, [
            {
                'player_id': pid,
                'amount': totals[pid],
                'hand': rankings[pid].description if pid in rankings else "Uncontested"
            }
            for pid in winners
        ], rankings)

    def _end_hand(self, awards: List[PotAward], winners: List[dict],
                  rankings: Dict[str, HandStrength]):
        """Record the result and tidy the seats for the next hand."""
        rake = self.pot_manager.rake
        self.total_rake += rake
        by_id = {p.id: p for p in self._hand_players}
        self.betting = None
        self.action_deadline = None

        self.last_hand_result = {
            'hand_number': self.hand_number,
            'winners': winners,
            'pot': sum(a.amount for a in awards),
            'pots': [a.to_dict() for a in awards],
            'rake': rake,
            'community_cards': [str(c) for c in self.community_cards],
            'player_stacks': {p.id: p.stack for p in self.players.values()},
            'hand_results': [
                {
                    'player_id': player_id,
                    'rank': strength.rank,
                    'description': strength.description,
                    'cards': [str(c) for c in by_id[player_id].hole_cards]
                }
                for player_id, strength in rankings.items()
            ],
            'actions': self.get_action_history()
        }

        for seat, player in list(self.players.items()):
            if player.leave_pending:
                del self.players[seat]
                logger.info("Table %s: %s left after the hand", self.table_id, player.id)
            elif player.stack == 0 or player.missed_turns >= self.max_missed_turns:
                player.is_sitting_out = True

        logger.info("Table %s: hand #%d finished, winners %s",
                    self.table_id, self.hand_number,
                    ", ".join(f"{w['player_id']} +{w['amount']}" for w in winners))

    def _abort_hand(self, reason: str):
        """Unwind a hand that cannot continue; every chip goes back."""
        logger.error("Table %s: aborting hand #%d: %s", self.table_id, self.hand_number, reason)
        self.pot_manager.refund_all()
        for player in self._hand_players:
            player.reset_for_hand()
        self.community_cards = []
        self.betting = None
        self.action_deadline = None
        self.phase = GamePhase.WAITING
        self.last_hand_result = {
            'hand_number': self.hand_number,
            'aborted': True,
            'reason': reason
        }
        self._touch()

    def reset_to_waiting(self):
        """Clear the finished hand from view when no new hand can start."""
        if self.hand_in_progress:
            raise IllegalAction("Hand in progress")
        for player in self.players.values():
            player.reset_for_hand()
        self.community_cards = []
        self.pot_manager = PotManager()
        self.revealed = set()
        self.phase = GamePhase.WAITING
        self._touch()

    # Snapshots

    def get_valid_actions(self, player_id: str) -> List[dict]:
        """Get valid actions for a player."""
        actor = self.actor
        if actor is None or actor.id != player_id:
            return []
        return self.betting.legal_actions(actor)

    def get_game_state(self, for_player: Optional[str] = None,
                       now: Optional[float] = None) -> GameState:
        """Immutable snapshot personalised for one viewer."""
        actor = self.actor
        players = []
        for seat in sorted(self.players):
            player = self.players[seat]
            show_cards = bool(player.hole_cards) and (
                player.id == for_player or player.id in self.revealed
            )
            players.append(PlayerView(
                id=player.id,
                name=player.name,
                chips=player.stack,
                position=seat,
                cards=[str(c) for c in player.hole_cards] if show_cards else None,
                bet=player.current_bet,
                folded=player.is_folded,
                all_in=player.is_all_in,
                sitting_out=player.is_sitting_out,
                disconnected=player.is_disconnected,
                is_dealer=seat == self.dealer_seat,
                is_small_blind=seat == self.small_blind_seat,
                is_big_blind=seat == self.big_blind_seat,
                is_turn=actor is player
            ))

        remaining = self.seconds_until_deadline(now)
        valid_actions = None
        if for_player and actor is not None and actor.id == for_player:
            valid_actions = [ValidAction(**a) for a in self.get_valid_actions(for_player)]

        winner = None
        winners = None
        result = self.last_hand_result
        if self.phase == GamePhase.SHOWDOWN and result and result.get('winners'):
            winners = [
                WinnerSummary(player_id=w['player_id'], hand=w['hand'], amount=w['amount'])
                for w in result['winners']
            ]
            winner = winners[0]

        return GameState(
            table_id=self.table_id,
            hand_number=self.hand_number,
            phase=self.phase.value,
            players=players,
            community_cards=[str(c) for c in self.community_cards],
            pot=self.pot,
            pots=[PotView(amount=p.amount, eligible_players=p.eligible_players)
                  for p in self.pot_manager.pots],
            current_bet=self.current_bet,
            min_raise=self.betting.min_raise_to if self.betting else self.big_blind,
            turn_timer=math.ceil(remaining) if remaining is not None else None,
            turn_id=self.turn_id,
            valid_actions=valid_actions,
            winner=winner,
            winners=winners
        )

    def get_action_history(self) -> List[dict]:
        """Get the action history for current hand."""
        return [a.to_dict() for a in self.action_history]
