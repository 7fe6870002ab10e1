"""GeminiCoach: post-match trading critique backed by Gemini structured output."""

import json
import asyncio
from typing import Optional

from google import genai
from google.genai import types as genai_types
from pydantic import ValidationError

from config import Settings
from schemas.results import Critique, CritiqueRequest
from services.coach.base import CritiqueProvider
from services.coach.heuristics import HeuristicCoach
from services.coach.helpers import (
    logger,
    settings as default_settings,
    _cache,
    _cache_key,
    _transaction_trace,
    FEAR_SENTIMENT,
    HYPE_SENTIMENT,
    MAX_LEARNING_CARDS,
)
from services.coach.schemas import _CritiqueGeminiOutput


class GeminiCoach(CritiqueProvider):
    """Financial coach agent backed by Gemini with structured JSON output."""

    def __init__(self, settings: Optional[Settings] = None, client=None):
        settings = settings or default_settings
        self.use_mock = settings.use_mock_gemini
        self.max_retries = settings.gemini_max_retries
        self.timeout = settings.gemini_timeout_seconds
        self.model_name = settings.gemini_model
        self.fallback = HeuristicCoach()

        if client is not None:
            self.client = client
        elif not self.use_mock and settings.gemini_api_key:
            self.client = genai.Client(api_key=settings.gemini_api_key)
        else:
            self.client = None

    # ── Low-level Gemini call with retries + timeout + schema validation ──

    async def _call_gemini(
        self,
        prompt: str,
        response_schema: type,
        cache_key_str: str | None = None,
    ) -> dict:
        """
        Call Gemini with automatic retries, timeout, rate-limit back-off and
        Pydantic schema validation. Returns the validated dict.
        """
        if cache_key_str and cache_key_str in _cache:
            logger.info("Cache hit for %s", cache_key_str)
            return _cache[cache_key_str]

        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                response = await asyncio.wait_for(
                    asyncio.to_thread(
                        self.client.models.generate_content,
                        model=self.model_name,
                        contents=prompt,
                        config=genai_types.GenerateContentConfig(
                            response_mime_type="application/json",
                            response_schema=response_schema,
                            temperature=1.0,
                        ),
                    ),
                    timeout=self.timeout,
                )

                data = json.loads(response.text.strip())
                result = response_schema.model_validate(data).model_dump()

                if cache_key_str:
                    _cache[cache_key_str] = result
                logger.info("Gemini critique call succeeded on attempt %d", attempt)
                return result

            except asyncio.TimeoutError:
                logger.warning("Gemini timeout attempt %d/%d", attempt, self.max_retries)
                last_error = TimeoutError("Gemini call timed out")

            except json.JSONDecodeError as e:
                logger.warning("Gemini returned invalid JSON attempt %d: %s", attempt, e)
                last_error = e

            except ValidationError as e:
                logger.warning("Gemini output failed schema validation attempt %d: %s", attempt, e)
                last_error = e

            except Exception as e:
                error_str = str(e).lower()
                if "429" in error_str or "rate" in error_str or "quota" in error_str:
                    wait = 2 ** attempt
                    logger.warning("Rate limited, backing off %ds", wait)
                    await asyncio.sleep(wait)
                else:
                    logger.error("Gemini error attempt %d: %s", attempt, e)
                last_error = e

            # Exponential back-off between retries
            if attempt < self.max_retries:
                await asyncio.sleep(1.5 ** attempt)

        raise RuntimeError(
            f"Gemini call failed after {self.max_retries} attempts: {last_error}"
        )

    # ── Public API ────────────────────────────────────────────────────────

    async def critique(self, request: CritiqueRequest) -> Critique:
        if self.use_mock or not self.client:
            return self.fallback.analyze(request)

        prompt = self._build_critique_prompt(request)
        try:
            data = await self._call_gemini(prompt, _CritiqueGeminiOutput, _cache_key(request))
            data["learning_cards"] = data.get("learning_cards", [])[:MAX_LEARNING_CARDS]
            return Critique.model_validate(data)
        except Exception as e:
            logger.error(
                "Gemini critique failed for %s, falling back to heuristic: %s",
                request.player_name, e,
            )
            return self.fallback.analyze(request)

    # ── Prompt ────────────────────────────────────────────────────────────

    @staticmethod
    def _build_critique_prompt(request: CritiqueRequest) -> str:
        strategy = request.strategy_id.value if request.strategy_id else "none"
        avatar = request.avatar_id.value if request.avatar_id else "none"
        return f"""You are a friendly but honest financial coach reviewing one player's
performance in a fast multiplayer trading game. Prices were driven by news
headlines and per-class market sentiment (-100 fearful to +100 euphoric).

PLAYER: {request.player_name}
AVATAR: {avatar}
STRATEGY: {strategy}
STARTING CASH: ${request.starting_cash:,.2f}
FINAL VALUE: ${request.final_value:,.2f}
ROI: {request.roi:+.2f}%
RISK SCORE: {request.risk_score}/100
DISTINCT ASSETS HELD AT END: {request.distinct_assets_held}

TRADE LOG:
{_transaction_trace(request.transactions)}

Guidance:
- Buying when sentiment <= {FEAR_SENTIMENT:.0f} is contrarian; selling then may be panic.
- Buying when sentiment >= {HYPE_SENTIMENT:.0f} may be hype-chasing.
- Cite specific trades (round, asset) as evidence.

Return JSON with:
- player_summary.what_you_did_well: 1-3 short strings
- player_summary.mistakes_and_opportunities: 1-3 short strings
- player_summary.improvement_suggestions: 1-3 short strings
- learning_cards: up to {MAX_LEARNING_CARDS} items with title, text, deep_dive, search_query
"""
