from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Gemini API (post-match coaching)
    gemini_api_key: str = ""
    use_mock_gemini: bool = False
    gemini_model: str = "gemini-2.5-flash"
    gemini_max_retries: int = 2
    gemini_timeout_seconds: int = 10
    gemini_cache_ttl_seconds: int = 300

    # Match timing (seconds)
    tick_seconds: float = 1.0
    max_rounds: int = 5
    news_phase_seconds: int = 5
    trading_phase_seconds: int = 30
    intro_seconds: int = 3
    avatar_selection_seconds: int = 15
    strategy_selection_seconds: int = 15
    scenario_teaser_seconds: int = 5
    tutorial_seconds: int = 5

    # Economy
    starting_cash: float = 10_000.0
    auto_start_on_join: bool = True

    # Results: hard bound on one player's critique call
    critique_timeout_seconds: float = 20.0

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = True

    # CORS
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
