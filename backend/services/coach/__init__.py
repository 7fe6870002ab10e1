"""Post-match critique providers: Gemini-backed coach with a deterministic fallback."""

from services.coach.base import CritiqueProvider
from services.coach.heuristics import HeuristicCoach
from services.coach.service import GeminiCoach
from services.coach.helpers import _cache, _cache_key, _transaction_trace

__all__ = [
    "CritiqueProvider",
    "HeuristicCoach",
    "GeminiCoach",
    "_cache",
    "_cache_key",
    "_transaction_trace",
]
