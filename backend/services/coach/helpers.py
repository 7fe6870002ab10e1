"""Module-level helpers, caches, and thresholds for the coaching providers."""

import hashlib
import logging

from cachetools import TTLCache

from config import get_settings
from models.player import Transaction
from schemas.results import CritiqueRequest

logger = logging.getLogger(__name__)
settings = get_settings()

# ── Response cache keyed on a hash of the critique request ───────────────────
_cache: TTLCache = TTLCache(maxsize=256, ttl=settings.gemini_cache_ttl_seconds)

# ── Sentiment / risk thresholds shared by prompt and heuristics ──────────────
HYPE_SENTIMENT = 30.0
FEAR_SENTIMENT = -30.0
HIGH_RISK = 70
MAX_LEARNING_CARDS = 3


def _transaction_trace(transactions: list[Transaction]) -> str:
    """Serialize the trade log into a compact text trace for the prompt."""
    if not transactions:
        return "(no trades)"
    lines: list[str] = []
    for i, t in enumerate(transactions):
        lines.append(
            f"#{i+1} | round {t.round} | {t.type.value} {t.amount:g} {t.asset_id} "
            f"({t.asset_type.value}) @ ${t.price:.6g} | total=${t.total_value:.2f} | "
            f"sentiment={t.sentiment_at_time:+.0f} | event={t.event_active or 'none'}"
        )
    return "\n".join(lines)


def _cache_key(request: CritiqueRequest) -> str:
    digest = hashlib.sha256(request.model_dump_json().encode()).hexdigest()[:16]
    return f"{request.player_id}:critique:{digest}"
