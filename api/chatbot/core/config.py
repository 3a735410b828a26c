"""
Configuration module using Pydantic Settings.

Loads provider selection, API keys, generation parameters and web-search
options from environment variables. Supports .env files for local development.

No key is required at startup: missing credentials are reported on the first
request that needs them.
"""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROVIDER = "groq"
BING_SEARCH_ENDPOINT = "https://api.bing.microsoft.com/v7.0/search"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Provider selection
    provider: str = DEFAULT_PROVIDER

    # Groq (OpenAI-compatible endpoint)
    groq_api_key: str = ""
    groq_model: str = "llama-3.3-70b-versatile"
    groq_base_url: str = "https://api.groq.com/openai/v1"

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-3.5-turbo"

    # Generation
    temperature: float = 0.7
    max_tokens: int = 1024
    request_timeout_seconds: float = 60.0
    system_prompt: str = ""

    # Web search (Bing)
    use_web_search: bool = False
    bing_api_key: str = ""
    bing_endpoint: str = BING_SEARCH_ENDPOINT
    search_market: str = "en-US"
    search_result_count: int = 3
    search_timeout_seconds: float = 10.0

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    environment: str = Field(
        "development",
        validation_alias=AliasChoices("environment", "node_env"),
    )
    log_level: str = "INFO"
    allowed_origins: str = "*"

    # Rate limiting placeholders (not enforced)
    rate_limit_window_seconds: int = 900
    rate_limit_max_requests: int = 100

    # Application Insights
    applicationinsights_connection_string: str = ""

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @property
    def provider_name(self) -> str:
        """Normalized provider name (case-insensitive, default when blank)."""
        return self.provider.strip().lower() or DEFAULT_PROVIDER


@lru_cache
def get_settings() -> Settings:
    """Factory for cached settings instance."""
    return Settings()
