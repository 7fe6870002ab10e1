from fastapi import APIRouter, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from catalog.game_data import AVATARS, SCENARIOS, STRATEGIES, starting_power_ups

router = APIRouter(prefix="/api/game", tags=["ops"])

# Rate limiter: keyed by client IP
limiter = Limiter(key_func=get_remote_address)


def _summary(request: Request, result) -> dict:
    state = request.app.state.match.state
    return {
        "result": result.value,
        "match_id": state.id,
        "phase": state.phase.value,
        "sub_phase": state.sub_phase.value,
        "players": len(state.players),
    }


@router.post("/start")
@limiter.limit("20/minute")
async def start_game(request: Request):
    """Start the pre-match countdown without waiting for a join."""
    result = request.app.state.match.start_pre_match()
    return _summary(request, result)


@router.post("/reset")
@limiter.limit("10/minute")
async def reset_game(request: Request):
    """Discard the current match; connected players are kept."""
    result = request.app.state.match.reset()
    return _summary(request, result)


@router.get("/catalog")
async def get_catalog():
    """Choices shown during pre-match: avatars, strategies, scenarios and power-ups."""
    return {
        "avatars": [a.model_dump(mode="json") for a in AVATARS],
        "strategies": [s.model_dump(mode="json") for s in STRATEGIES],
        "scenarios": [
            s.model_dump(mode="json", include={"id", "title", "description", "effect_description"})
            for s in SCENARIOS
        ],
        "power_ups": [p.model_dump(mode="json") for p in starting_power_ups()],
    }
