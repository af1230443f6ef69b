"""Engine error types."""


class PokerError(Exception):
    """Base class for errors reported back to the offending client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class IllegalAction(PokerError):
    """Wrong actor, illegal action type, stale turn or amount out of bounds."""


class InsufficientChips(PokerError):
    """A commitment exceeds the player's remaining stack."""


class DeckExhausted(PokerError):
    """More cards were requested than the deck holds."""


class CapacityExceeded(PokerError):
    """No seat is available at the table."""
