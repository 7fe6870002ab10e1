from schemas.game import (
    JoinGame,
    SelectAvatar,
    SelectStrategy,
    BuyAsset,
    SellAsset,
    UsePowerUp,
    PlayAgain,
    ClientCommand,
    client_command_adapter,
    GameStateFrame,
    GameOverFrame,
)
from schemas.results import (
    LearningCard,
    PlayerSummary,
    Critique,
    CritiqueRequest,
    GameResult,
)

__all__ = [
    "JoinGame",
    "SelectAvatar",
    "SelectStrategy",
    "BuyAsset",
    "SellAsset",
    "UsePowerUp",
    "PlayAgain",
    "ClientCommand",
    "client_command_adapter",
    "GameStateFrame",
    "GameOverFrame",
    "LearningCard",
    "PlayerSummary",
    "Critique",
    "CritiqueRequest",
    "GameResult",
]
