"""
Bull vs Bear - Real-time Multiplayer Trading Match
A news-driven market simulation where players trade through timed rounds
and get a post-match critique from a Gemini-powered coach.
"""
import logging
import json
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from config import get_settings
from routers import game_router, ops_router
from routers.game import ConnectionHub
from routers.ops import limiter
from services.coach import GeminiCoach
from services.match_engine import MatchEngine
from services.scheduler import AsyncioScheduler

settings = get_settings()


# ── Structured JSON Logging ─────────────────────────────────────────
class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter for production observability."""
    def format(self, record):
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            log["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "match_id"):
            log["match_id"] = record.match_id
        return json.dumps(log)


def setup_logging():
    """Configure structured logging for all app loggers."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


logger = logging.getLogger("bullbear")


def create_match() -> MatchEngine:
    return MatchEngine(AsyncioScheduler(), GeminiCoach(settings), settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    setup_logging()
    app.state.hub = ConnectionHub()
    app.state.match = create_match()
    app.state.match.add_listener(app.state.hub)
    logger.info(
        "Starting Bull vs Bear API",
        extra={"match_id": app.state.match.match_id},
    )
    yield
    app.state.match.close()
    logger.info("Shutting down Bull vs Bear API")


# ── OpenAPI metadata ────────────────────────────────────────────────
OPENAPI_TAGS = [
    {"name": "game", "description": "Websocket match gateway: join, pick, trade, play again"},
    {"name": "ops", "description": "Health checks and match control endpoints"},
]

app = FastAPI(
    title="Bull vs Bear API",
    description=(
        "# Bull vs Bear - Multiplayer Trading Match\n\n"
        "Players join over a websocket, pick an avatar and strategy, then trade "
        "through five news-driven rounds:\n\n"
        "- Tick-driven prices moved by headlines, sentiment and scenario bias\n"
        "- Slippage on large orders and a per-round price safety rail\n"
        "- Risk-adjusted leaderboard with per-player coaching at the end\n"
    ),
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=OPENAPI_TAGS,
    license_info={"name": "MIT"},
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limiter state (required by slowapi)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Include routers
app.include_router(game_router)
app.include_router(ops_router)


# ── Request logging middleware ───────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request with method, path, and response time."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    if not request.url.path.startswith("/health"):
        logger.info(
            "%s %s %d %.0fms",
            request.method, request.url.path, response.status_code, duration_ms,
        )
    return response


@app.get("/", tags=["ops"])
async def root():
    """Root endpoint with discovery links."""
    return {
        "name": "Bull vs Bear API",
        "version": "1.0.0",
        "description": "Real-time multiplayer trading match",
        "websocket": "/ws",
        "docs": "/docs",
        "health": "/health",
        "catalog": "/api/game/catalog",
    }


@app.get("/health", tags=["ops"])
async def health_check(request: Request):
    """Readiness probe. Reports the live match and coach mode."""
    match = request.app.state.match
    state = match.state
    checks = {
        "api": "ok",
        "match_phase": state.phase.value,
        "players_connected": len(state.connected_players()),
        "timer": "running" if match.timer_active else "idle",
        "gemini_mode": "mock" if settings.use_mock_gemini else "live",
        "gemini_model": settings.gemini_model,
    }
    return {"status": "healthy", "service": "bullbear-api", "version": "1.0.0", "checks": checks}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
