"""
Settings for the AI and telemetry proxy functions.

Uses pydantic-settings to load and validate configuration values from
environment variables (or a .env file). These settings control which
OpenAI-compatible LLM endpoint and model answer pairing/enrichment
requests, and where error-telemetry envelopes are relayed.
"""

from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Validated proxy settings loaded from environment variables.

    Attributes:
        LLM_API_KEY:   API key for the LLM provider. When unset, the AI proxy
                       refuses requests with a 500 instead of failing at startup.
        LLM_BASE_URL:  Base URL of the OpenAI-compatible API.
        LLM_MODEL:     Model used for pairing and enrichment.
        SENTRY_HOST:   Ingest host (including the public key part) envelopes go to.
        SENTRY_PROJECT_IDS: Comma-separated allow-list of project ids.
    """
    LLM_API_KEY: Optional[str] = None
    LLM_BASE_URL: str = "https://api.openai.com/v1"
    LLM_MODEL: str = "gpt-4o"
    LLM_MAX_TOKENS_PAIRING: int = 2048
    LLM_MAX_TOKENS_ENRICHMENT: int = 1024

    SENTRY_HOST: str = ""
    SENTRY_PROJECT_IDS: str = ""

    class Config:
        env_file = ".env"       # Load variables from a .env file if present
        extra = "ignore"        # Ignore extra env vars not listed above

    @property
    def sentry_project_ids(self) -> List[str]:
        return [p.strip() for p in self.SENTRY_PROJECT_IDS.split(",") if p.strip()]


# Singleton instance used throughout the application
settings = Settings()
