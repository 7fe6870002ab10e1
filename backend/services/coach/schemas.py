"""Pydantic schemas for Gemini structured output validation."""
from pydantic import BaseModel, Field

from schemas.results import LearningCard, PlayerSummary


class _CritiqueGeminiOutput(BaseModel):
    player_summary: PlayerSummary
    learning_cards: list[LearningCard] = Field(default_factory=list)
