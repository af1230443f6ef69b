from .poker import Card, Deck
from .hand_evaluator import HandEvaluator, HandStrength
from .player import Player
from .pot import PotManager
from .betting import ActionType, BettingRound, GamePhase
from .table import Table
from .runner import Intent, IntentType, TableRunner
from .errors import PokerError, IllegalAction, InsufficientChips, DeckExhausted, CapacityExceeded

__all__ = [
    'Card', 'Deck', 'HandEvaluator', 'HandStrength', 'Player', 'PotManager',
    'ActionType', 'BettingRound', 'GamePhase', 'Table', 'Intent', 'IntentType',
    'TableRunner', 'PokerError', 'IllegalAction', 'InsufficientChips',
    'DeckExhausted', 'CapacityExceeded'
]
