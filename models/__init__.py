from .schemas import (
    TableSettings,
    PlayerView,
    PotView,
    ValidAction,
    WinnerSummary,
    GameState,
    WebSocketMessage,
    TableRequest,
    JoinTableRequest,
    PlayerActionRequest,
    AddChipsRequest
)

__all__ = [
    'TableSettings',
    'PlayerView',
    'PotView',
    'ValidAction',
    'WinnerSummary',
    'GameState',
    'WebSocketMessage',
    'TableRequest',
    'JoinTableRequest',
    'PlayerActionRequest',
    'AddChipsRequest'
]
