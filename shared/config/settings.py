"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LLMProvider(str, Enum):
    """Supported hosted language-model providers."""

    OPENAI = "openai"
    CLAUDE = "claude"


class SearchSettings(BaseSettings):
    """Search pipeline tuning."""

    model_config = SettingsConfigDict(env_prefix="SEARCH_")

    # Result cache
    cache_ttl_seconds: float = 6 * 60 * 60
    cache_max_entries: int = 1000

    # Fetch
    source_timeout_seconds: float = 8.0

    # Classification
    relevance_threshold: float = 0.8
    batch_size: int = 10
    batch_delay_seconds: float = 1.0

    # Cache warm-up
    prewarm_delay_seconds: float = 2.0


class RegulationsGovSettings(BaseSettings):
    """Regulations.gov document search API configuration."""

    model_config = SettingsConfigDict(env_prefix="REGULATIONS_GOV_")

    api_key: SecretStr = SecretStr("")
    base_url: str = "https://api.regulations.gov/v4"
    page_size: int = 25
    max_pages: int = 1
    # 1000 requests/hour per key
    min_request_interval_seconds: float = 1.0
    use_agency_filter: bool = True


class SBASettings(BaseSettings):
    """SBA content search configuration."""

    model_config = SettingsConfigDict(env_prefix="SBA_")

    base_url: str = "https://api.sba.gov/v1"
    timeout_seconds: float = 6.0
    limit: int = 15


class OpenAISettings(BaseSettings):
    """OpenAI API configuration."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    api_key: SecretStr = SecretStr("")
    model: str = "gpt-4o-mini"


class ClaudeSettings(BaseSettings):
    """Anthropic Claude API configuration."""

    model_config = SettingsConfigDict(env_prefix="CLAUDE_")

    api_key: SecretStr = Field(
        default=SecretStr(""),
        alias="ANTHROPIC_API_KEY",
    )
    model: str = "claude-sonnet-4-20250514"


class LLMSettings(BaseSettings):
    """Language-model classification configuration."""

    model_config = SettingsConfigDict(env_prefix="LLM_")

    enabled: bool = True
    provider: LLMProvider = LLMProvider.OPENAI
    temperature: float = 0.1
    max_retries: int = 3
    timeout_seconds: float = 60.0
    max_tokens: int = 8192

    # Provider-specific settings
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    claude: ClaudeSettings = Field(default_factory=ClaudeSettings)


class CORSSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into list."""
        return [o.strip() for o in self.origins.split(",") if o.strip()]


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO
    port: int = Field(default=8010, alias="COMPLIANCE_SEARCH_PORT")

    # Pipeline
    search: SearchSettings = Field(default_factory=SearchSettings)

    # External sources
    regulations_gov: RegulationsGovSettings = Field(default_factory=RegulationsGovSettings)
    sba: SBASettings = Field(default_factory=SBASettings)

    # LLM configuration
    llm: LLMSettings = Field(default_factory=LLMSettings)

    # Security
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
