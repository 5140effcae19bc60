"""
EVA Application Settings

Configuration management using Pydantic Settings.
All sensitive values are loaded from environment variables.

SECURITY: Never log or expose settings containing secrets.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenAISettings(BaseSettings):
    """OpenAI API configuration."""

    model_config = SettingsConfigDict(env_prefix="EVA_OPENAI_")

    api_key: SecretStr = Field(default=SecretStr(""), description="OpenAI API key")
    model: str = Field(default="gpt-4", description="Model identifier")
    max_tokens: int = Field(default=500, ge=50, le=4096)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=30.0, gt=0.0, le=300.0)


class GeminiSettings(BaseSettings):
    """Google Gemini API configuration."""

    model_config = SettingsConfigDict(env_prefix="EVA_GEMINI_")

    api_key: SecretStr = Field(default=SecretStr(""), description="Gemini API key")
    model: str = Field(default="gemini-1.5-flash", description="Model identifier")


class BeliefStoreSettings(BaseSettings):
    """External belief-modeling service configuration."""

    model_config = SettingsConfigDict(env_prefix="EVA_BELIEF_STORE_")

    enabled: bool = Field(default=True, description="Try the belief store at all")
    url: str = Field(default="http://localhost:8120", description="Belief store base URL")
    api_key: SecretStr = Field(default=SecretStr(""), description="Belief store API key")
    timeout_seconds: float = Field(default=5.0, gt=0.0, le=60.0)


class RoutingSettings(BaseSettings):
    """Modality routing and generation request shaping."""

    model_config = SettingsConfigDict(env_prefix="EVA_ROUTING_")

    history_window: int = Field(default=10, ge=0, le=10, description="History messages sent to generation")
    belief_statement_window: int = Field(default=5, ge=1, le=50)
    max_tokens: int = Field(default=500, ge=50, le=4096)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    dialectic_max_tokens: int = Field(default=150, ge=20, le=1024)
    reflection_max_tokens: int = Field(default=50, ge=10, le=512)
    random_seed: int | None = Field(default=None, description="Seed for text adaptation (tests only)")


class SafetySettings(BaseSettings):
    """Crisis screening configuration."""

    model_config = SettingsConfigDict(env_prefix="EVA_SAFETY_")

    incident_lookback_hours: int = Field(default=24, ge=1, le=168)
    escalation_history_window: int = Field(default=5, ge=0, le=50)
    audit_log_enabled: bool = Field(default=True)


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with EVA_ prefix.
    Sensitive values use SecretStr to prevent accidental logging.

    Usage:
        settings = get_settings()
        window = settings.routing.history_window
    """

    model_config = SettingsConfigDict(
        env_prefix="EVA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )

    # LLM Provider selection
    llm_primary_provider: Literal["openai", "gemini"] = Field(
        default="openai",
        description="Primary generation provider (openai, gemini)"
    )

    # Nested settings
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)
    belief_store: BeliefStoreSettings = Field(default_factory=BeliefStoreSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)
    safety: SafetySettings = Field(default_factory=SafetySettings)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, construct Settings directly and inject it.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
