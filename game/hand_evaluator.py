"""Hand evaluation for Texas Hold'em poker."""

from collections import Counter
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple
from .poker import Card


class HandRank:
    HIGH_CARD = 1
    PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9

    NAMES = {
        1: "High Card",
        2: "Pair",
        3: "Two Pair",
        4: "Three of a Kind",
        5: "Straight",
        6: "Flush",
        7: "Full House",
        8: "Four of a Kind",
        9: "Straight Flush"
    }


@dataclass(frozen=True, order=True)
class HandStrength:
    """Comparable hand value: category first, then the kicker array."""
    rank: int
    tiebreakers: Tuple[int, ...]
    description: str = field(default="", compare=False)

    @property
    def name(self) -> str:
        return HandRank.NAMES[self.rank]


class HandEvaluator:
    """Evaluates poker hands and determines winners."""

    @staticmethod
    def evaluate(cards: Sequence[Card]) -> HandStrength:
        """
        Evaluate a hand of up to 5 cards.

        Straights and flushes need exactly 5 cards; smaller hands can only
        make rank groups (pairs, trips, quads) or high card.
        """
        if not 1 <= len(cards) <= 5:
            raise ValueError("Hand must contain between 1 and 5 cards")

        values = sorted([c.value for c in cards], reverse=True)
        value_counts = Counter(values)
        # Rank groups ordered by size, then by rank
        groups = sorted(value_counts.items(), key=lambda vc: (vc[1], vc[0]), reverse=True)
        counts = [c for _, c in groups]

        is_flush = len(cards) == 5 and len({c.suit for c in cards}) == 1
        is_straight, straight_high = HandEvaluator._check_straight(values)

        if is_flush and is_straight:
            if straight_high == 14:
                return HandStrength(HandRank.STRAIGHT_FLUSH, (14,), "Royal Flush")
            return HandStrength(HandRank.STRAIGHT_FLUSH, (straight_high,),
                                f"Straight Flush, {HandEvaluator._value_name(straight_high)} high")

        if counts[0] == 4:
            quad = groups[0][0]
            kickers = tuple(v for v, _ in groups[1:])
            return HandStrength(HandRank.FOUR_OF_A_KIND, (quad,) + kickers,
                                f"Four of a Kind, {HandEvaluator._plural(quad)}")

        if counts[0] == 3 and len(counts) > 1 and counts[1] == 2:
            trips, pair = groups[0][0], groups[1][0]
            return HandStrength(HandRank.FULL_HOUSE, (trips, pair),
                                f"Full House, {HandEvaluator._plural(trips)} full of {HandEvaluator._plural(pair)}")

        if is_flush:
            return HandStrength(HandRank.FLUSH, tuple(values),
                                f"Flush, {HandEvaluator._value_name(values[0])} high")

        if is_straight:
            return HandStrength(HandRank.STRAIGHT, (straight_high,),
                                f"Straight, {HandEvaluator._value_name(straight_high)} high")

        if counts[0] == 3:
            trips = groups[0][0]
            kickers = tuple(v for v, _ in groups[1:])
            return HandStrength(HandRank.THREE_OF_A_KIND, (trips,) + kickers,
                                f"Three of a Kind, {HandEvaluator._plural(trips)}")

        if counts[0] == 2 and len(counts) > 1 and counts[1] == 2:
            high, low = groups[0][0], groups[1][0]
            kickers = tuple(v for v, _ in groups[2:])
            return HandStrength(HandRank.TWO_PAIR, (high, low) + kickers,
                                f"Two Pair, {HandEvaluator._plural(high)} and {HandEvaluator._plural(low)}")

        if counts[0] == 2:
            pair = groups[0][0]
            kickers = tuple(v for v, _ in groups[1:])
            return HandStrength(HandRank.PAIR, (pair,) + kickers,
                                f"Pair of {HandEvaluator._plural(pair)}")

        return HandStrength(HandRank.HIGH_CARD, tuple(values),
                            f"High Card, {HandEvaluator._value_name(values[0])}")

    @staticmethod
    def _check_straight(values: List[int]) -> Tuple[bool, int]:
        """Check if values form a straight. Returns (is_straight, high_card)."""
        sorted_vals = sorted(set(values), reverse=True)
        if len(sorted_vals) != 5:
            return False, 0

        # Regular straight
        if sorted_vals[0] - sorted_vals[4] == 4:
            return True, sorted_vals[0]

        # Ace-low straight (A-2-3-4-5)
        if sorted_vals == [14, 5, 4, 3, 2]:
            return True, 5

        return False, 0

    @staticmethod
    def _value_name(value: int) -> str:
        """Convert card value to name."""
        names = {11: 'Jack', 12: 'Queen', 13: 'King', 14: 'Ace'}
        return names.get(value, str(value))

    @staticmethod
    def _plural(value: int) -> str:
        return f"{HandEvaluator._value_name(value)}s"

    @staticmethod
    def best_hand(hole_cards: Sequence[Card],
                  community_cards: Sequence[Card]) -> Tuple[List[Card], HandStrength]:
        """
        Find the strongest hand from hole cards + community cards.
        Returns: (best_cards, strength)
        """
        all_cards = list(hole_cards) + list(community_cards)
        if not 2 <= len(all_cards) <= 7:
            raise ValueError("Need between 2 and 7 cards to evaluate")
        if len(set(all_cards)) != len(all_cards):
            raise ValueError("Duplicate cards in hand")

        if len(all_cards) <= 5:
            return all_cards, HandEvaluator.evaluate(all_cards)

        best_cards: List[Card] = []
        best: Optional[HandStrength] = None
        for combo in combinations(all_cards, 5):
            strength = HandEvaluator.evaluate(combo)
            if best is None or strength > best:
                best = strength
                best_cards = list(combo)

        return best_cards, best

    @staticmethod
    def rank_players(hole_cards: Dict[str, Sequence[Card]],
                     community_cards: Sequence[Card]) -> Dict[str, HandStrength]:
        """Evaluate every player's best hand against a shared board."""
        return {
            player_id: HandEvaluator.best_hand(cards, community_cards)[1]
            for player_id, cards in hole_cards.items()
        }

    @staticmethod
    def compare_hands(hands: List[Tuple[List[Card], List[Card]]]) -> List[int]:
        """
        Compare multiple hands and return indices of winners.
        hands: List of (hole_cards, community_cards) tuples
        Returns: List of winner indices (can be multiple for ties)
        """
        if not hands:
            return []

        evaluations = [HandEvaluator.best_hand(hole, community)[1] for hole, community in hands]
        max_eval = max(evaluations)
        return [i for i, e in enumerate(evaluations) if e == max_eval]
