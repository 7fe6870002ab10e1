from routers.game import router as game_router
from routers.ops import router as ops_router

__all__ = [
    "game_router",
    "ops_router",
]
