"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Collaborator endpoints (match-data, ai-picks, analyze, tts, share)
    PROVIDER_BASE_URL: str = "http://localhost:3000"
    REQUEST_TIMEOUT_SECONDS: float = 15.0

    # Odds provider key. Empty = manual entry mode for the analyzer form.
    ODDS_API_KEY: str = ""

    # AI picks (server-side flagged matches)
    AI_PICKS_LIMIT: int = 50
    AI_PICKS_CACHE_TTL: int = 300  # 5 min, same as the upstream revalidate window

    # Confidence meter: below this score the meter is hidden
    CONFIDENCE_DISPLAY_MIN: int = 65

    # Form / streaks
    FORM_WINDOW: int = 5

    # Trending + heuristic value flags
    TRENDING_WINDOW_HOURS: int = 48
    TRENDING_LIMIT: int = 3
    VALUE_FLAG_LIMIT: int = 10

    # Telemetry / Observability
    METRICS_BEARER_TOKEN: str = ""  # Bearer token for /metrics (empty = open)
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def manual_entry_mode(self) -> bool:
        """True when no odds provider key is configured."""
        return not self.ODDS_API_KEY.strip()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
