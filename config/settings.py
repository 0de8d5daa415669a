from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    PERPLEXITY_API_KEY: Optional[str] = ""
    GEMINI_API_KEY: Optional[str] = ""
    OPENAI_API_KEY: Optional[str] = ""
    ANTHROPIC_API_KEY: Optional[str] = ""

    # Application Settings
    APP_NAME: str = "AI Visibility Scanner"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    PORT: int = 8000
    PUBLIC_BASE_URL: str = "https://example.com"

    # Platforms queried on every scan (order is display order)
    PLATFORMS: list = ["perplexity", "gemini", "chatgpt"]

    # Platform models
    PERPLEXITY_MODEL: str = "sonar"
    PERPLEXITY_API_URL: str = "https://api.perplexity.ai/chat/completions"
    GEMINI_MODEL: str = "gemini-2.5-flash"
    CHATGPT_MODEL: str = "gpt-5-mini"
    PLATFORM_MAX_TOKENS: int = 500

    # LLM Provider Configuration for helper tasks
    # Options: "openai", "gemini", "claude"
    QUERY_GENERATION_PROVIDER: str = "openai"
    CONTENT_PREVIEW_PROVIDER: str = "openai"
    CATEGORY_PROVIDER: str = "openai"
    QUERY_GENERATION_MODEL: str = "gpt-5.2"
    CLAUDE_MODEL: str = "claude-3-5-haiku-20241022"

    # Timeouts (seconds)
    SITE_CONTEXT_TIMEOUT_SECONDS: float = 5.0
    CATEGORY_TIMEOUT_SECONDS: float = 5.0
    QUERY_GENERATION_TIMEOUT_SECONDS: float = 8.0
    PLATFORM_TIMEOUT_SECONDS: float = 30.0
    CONTENT_PREVIEW_TIMEOUT_SECONDS: float = 15.0
    SCAN_TIMEOUT_SECONDS: float = 120.0

    # Feature toggles
    CONTENT_PREVIEW_ENABLED: bool = True
    CATEGORY_CLASSIFICATION_ENABLED: bool = False

    # Scoring
    SCORING_VERSION: str = "v3"

    # Rate limiting: slots per caller per window
    RATE_LIMIT_MAX: int = 5
    RATE_LIMIT_WINDOW_SECONDS: int = 3600
    RATE_LIMIT_BACKEND: str = "memory"  # "memory" or "redis"
    # Reverse proxies in front of the app; 0 ignores forwarding headers
    TRUSTED_PROXY_COUNT: int = 1

    # Report storage
    REPORT_STORE_BACKEND: str = "redis"  # "redis" or "memory"
    REPORT_TTL_SECONDS: int = 0  # 0 keeps reports forever

    # Redis Settings
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_MAX_CONNECTIONS: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
