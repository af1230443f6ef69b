"""Unit tests for hand_evaluator.py - Hand ranking logic."""

import pytest
from game.poker import Card, parse_cards
from game.hand_evaluator import HandEvaluator, HandRank, HandStrength


def best(hole: str, board: str = "") -> HandStrength:
    return HandEvaluator.best_hand(parse_cards(hole), parse_cards(board))[1]


class TestEvaluateFiveCards:
    """Category detection on exactly five cards."""

    def test_royal_flush(self):
        strength = HandEvaluator.evaluate(parse_cards("A♥ K♥ Q♥ J♥ 10♥"))
        assert strength.rank == HandRank.STRAIGHT_FLUSH
        assert strength.tiebreakers == (14,)
        assert strength.description == "Royal Flush"

    def test_straight_flush(self):
        strength = HandEvaluator.evaluate(parse_cards("9♣ 8♣ 7♣ 6♣ 5♣"))
        assert strength.rank == HandRank.STRAIGHT_FLUSH
        assert strength.description == "Straight Flush, 9 high"

    def test_four_of_a_kind(self):
        strength = HandEvaluator.evaluate(parse_cards("K♥ K♦ K♣ K♠ 5♥"))
        assert strength.rank == HandRank.FOUR_OF_A_KIND
        assert strength.tiebreakers == (13, 5)
        assert strength.description == "Four of a Kind, Kings"

    def test_full_house(self):
        strength = HandEvaluator.evaluate(parse_cards("K♥ K♦ K♣ 7♠ 7♥"))
        assert strength.rank == HandRank.FULL_HOUSE
        assert strength.tiebreakers == (13, 7)
        assert strength.description == "Full House, Kings full of 7s"

    def test_flush(self):
        strength = HandEvaluator.evaluate(parse_cards("A♦ J♦ 8♦ 5♦ 2♦"))
        assert strength.rank == HandRank.FLUSH
        assert strength.tiebreakers == (14, 11, 8, 5, 2)

    def test_straight(self):
        strength = HandEvaluator.evaluate(parse_cards("9♥ 8♦ 7♣ 6♠ 5♥"))
        assert strength.rank == HandRank.STRAIGHT
        assert strength.tiebreakers == (9,)

    def test_ace_low_straight(self):
        """A-2-3-4-5 is a five-high straight."""
        strength = HandEvaluator.evaluate(parse_cards("A♥ 2♦ 3♣ 4♠ 5♥"))
        assert strength.rank == HandRank.STRAIGHT
        assert strength.tiebreakers == (5,)

    def test_three_of_a_kind(self):
        strength = HandEvaluator.evaluate(parse_cards("J♥ J♦ J♣ 9♠ 5♥"))
        assert strength.rank == HandRank.THREE_OF_A_KIND
        assert strength.tiebreakers == (11, 9, 5)

    def test_two_pair(self):
        strength = HandEvaluator.evaluate(parse_cards("K♥ K♦ 8♣ 8♠ 3♥"))
        assert strength.rank == HandRank.TWO_PAIR
        assert strength.tiebreakers == (13, 8, 3)
        assert strength.description == "Two Pair, Kings and 8s"

    def test_one_pair(self):
        strength = HandEvaluator.evaluate(parse_cards("10♥ 10♦ A♣ 7♠ 3♥"))
        assert strength.rank == HandRank.PAIR
        assert strength.tiebreakers == (10, 14, 7, 3)

    def test_high_card(self):
        strength = HandEvaluator.evaluate(parse_cards("A♥ J♦ 8♣ 5♠ 2♥"))
        assert strength.rank == HandRank.HIGH_CARD
        assert strength.name == "High Card"

    def test_evaluate_rejects_bad_sizes(self):
        with pytest.raises(ValueError):
            HandEvaluator.evaluate([])
        with pytest.raises(ValueError):
            HandEvaluator.evaluate(parse_cards("A♥ K♥ Q♥ J♥ 10♥ 9♥"))


class TestShortHands:
    """Fewer than five cards only make rank groups."""

    def test_pocket_pair_preflop(self):
        strength = best("A♥ A♦")
        assert strength.rank == HandRank.PAIR
        assert strength.description == "Pair of Aces"

    def test_four_suited_connectors_are_high_card(self):
        strength = HandEvaluator.evaluate(parse_cards("5♥ 6♥ 7♥ 8♥"))
        assert strength.rank == HandRank.HIGH_CARD
        assert strength.tiebreakers == (8, 7, 6, 5)

    def test_quads_from_four_cards(self):
        strength = HandEvaluator.evaluate(parse_cards("9♥ 9♦ 9♣ 9♠"))
        assert strength.rank == HandRank.FOUR_OF_A_KIND


class TestBestHand:
    """Best five of up to seven cards."""

    @pytest.mark.parametrize("hole, board, rank", [
        ("9♥ 8♥", "7♥ 6♥ 5♥ 2♣ K♦", HandRank.STRAIGHT_FLUSH),
        ("K♥ K♦", "K♣ K♠ Q♥ 2♣ 3♦", HandRank.FOUR_OF_A_KIND),
        ("Q♥ Q♦", "Q♣ 7♠ 7♥ 2♣ 3♦", HandRank.FULL_HOUSE),
        ("A♦ J♦", "8♦ 5♦ 2♦ K♣ 3♠", HandRank.FLUSH),
        ("9♥ 8♦", "7♣ 6♠ 5♥ 2♣ K♦", HandRank.STRAIGHT),
        ("J♥ J♦", "J♣ 9♠ 5♥ 2♣ 3♦", HandRank.THREE_OF_A_KIND),
        ("K♥ K♦", "8♣ 8♠ 3♥ 2♣ 4♦", HandRank.TWO_PAIR),
        ("10♥ 10♦", "A♣ 7♠ 3♥ 2♣ 5♦", HandRank.PAIR),
        ("A♥ J♦", "8♣ 5♠ 2♥ K♣ 3♦", HandRank.HIGH_CARD),
    ])
    def test_category_from_seven_cards(self, hole, board, rank):
        assert best(hole, board).rank == rank

    def test_category_order(self):
        fixtures = [
            ("A♥ J♦", "8♣ 5♠ 2♥ K♣ 3♦"),
            ("10♥ 10♦", "A♣ 7♠ 3♥ 2♣ 5♦"),
            ("K♥ K♦", "8♣ 8♠ 3♥ 2♣ 4♦"),
            ("J♥ J♦", "J♣ 9♠ 5♥ 2♣ 3♦"),
            ("9♥ 8♦", "7♣ 6♠ 5♥ 2♣ K♦"),
            ("A♦ J♦", "8♦ 5♦ 2♦ K♣ 3♠"),
            ("Q♥ Q♦", "Q♣ 7♠ 7♥ 2♣ 3♦"),
            ("K♥ K♦", "K♣ K♠ Q♥ 2♣ 3♦"),
            ("9♥ 8♥", "7♥ 6♥ 5♥ 2♣ K♦"),
        ]
        strengths = [best(hole, board) for hole, board in fixtures]
        assert strengths == sorted(strengths)
        assert len(set(s.rank for s in strengths)) == 9

    def test_royal_flush_beats_four_kings(self):
        royal = best("A♠ K♠", "Q♠ J♠ 10♠ 2♣ 3♦")
        quads = best("K♥ K♦", "K♣ K♠ Q♥ 2♣ 3♦")
        assert royal > quads
        assert royal.description == "Royal Flush"

    def test_best_cards_are_five(self):
        cards, strength = HandEvaluator.best_hand(
            parse_cards("A♥ K♥"), parse_cards("Q♥ J♥ 10♥ 2♣ 3♦")
        )
        assert len(cards) == 5
        assert set(cards) == set(parse_cards("A♥ K♥ Q♥ J♥ 10♥"))

    def test_wheel_is_lowest_straight(self):
        wheel = best("A♥ 2♦", "3♣ 4♠ 5♥ 9♣ K♦")
        six_high = best("6♥ 2♦", "3♣ 4♠ 5♥ 9♣ K♦")
        assert wheel.rank == six_high.rank == HandRank.STRAIGHT
        assert wheel.tiebreakers == (5,)
        assert six_high > wheel

    def test_wheel_straight_flush_below_six_high(self):
        wheel = HandEvaluator.evaluate(parse_cards("A♥ 2♥ 3♥ 4♥ 5♥"))
        six_high = HandEvaluator.evaluate(parse_cards("2♥ 3♥ 4♥ 5♥ 6♥"))
        assert wheel.rank == HandRank.STRAIGHT_FLUSH
        assert wheel.description == "Straight Flush, 5 high"
        assert six_high > wheel

    def test_full_house_breaks_on_trips_then_pair(self):
        board = "K♣ K♦ 7♠ 7♥ 2♣"
        kings_full = best("K♥ 3♦", board)
        sevens_full = best("7♣ A♦", board)
        assert kings_full.tiebreakers == (13, 7)
        assert sevens_full.tiebreakers == (7, 13)
        assert kings_full > sevens_full

    def test_two_sets_make_best_full_house(self):
        strength = best("Q♥ Q♦", "Q♣ 7♠ 7♥ 7♣ 3♦")
        assert strength.rank == HandRank.FULL_HOUSE
        assert strength.tiebreakers == (12, 7)

    def test_kicker_decides_pair(self):
        board = "A♣ 9♠ 6♥ 4♣ 2♦"
        assert best("A♥ K♦", board) > best("A♦ Q♣", board)

    def test_flush_compares_all_ranks(self):
        board = "A♥ 9♥ 6♥ 4♥ 2♣"
        assert best("K♥ 3♣", board) > best("Q♥ J♣", board)

    def test_board_plays_is_exact_tie(self):
        board = "4♣ 5♠ 6♥ 7♦ 8♣"
        first = best("2♥ 3♦", board)
        second = best("2♣ 3♠", board)
        assert first == second
        assert not first > second

    def test_description_ignored_in_comparison(self):
        assert HandStrength(2, (14, 13), "a") == HandStrength(2, (14, 13), "b")

    def test_duplicate_cards_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            best("A♥ A♥", "K♣ Q♦ 2♠")

    def test_too_many_cards_rejected(self):
        with pytest.raises(ValueError):
            best("A♥ K♥", "Q♥ J♥ 10♥ 9♥ 8♥ 7♥")


class TestRanking:
    def test_rank_players(self):
        board = parse_cards("5♣ 7♠ 9♥ 2♣ 3♦")
        rankings = HandEvaluator.rank_players({
            'alice': parse_cards("A♥ A♦"),
            'bob': parse_cards("K♥ K♦"),
        }, board)
        assert rankings['alice'] > rankings['bob']
        assert rankings['bob'].description == "Pair of Kings"

    def test_compare_hands_single_winner(self):
        community = parse_cards("5♣ 7♠ 9♥ 2♣ 3♦")
        winners = HandEvaluator.compare_hands([
            (parse_cards("A♥ A♦"), community),
            (parse_cards("K♥ K♦"), community)
        ])
        assert winners == [0]

    def test_compare_hands_tie(self):
        community = parse_cards("4♣ 5♠ 6♥ 7♦ 8♣")
        winners = HandEvaluator.compare_hands([
            (parse_cards("2♥ 3♦"), community),
            (parse_cards("2♣ 3♠"), community)
        ])
        assert winners == [0, 1]

    def test_compare_no_hands(self):
        assert HandEvaluator.compare_hands([]) == []
