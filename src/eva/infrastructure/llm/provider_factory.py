"""
Generation Provider Factory

Factory for creating generation providers based on configuration.
Enables switching between providers via environment variable.

CONFIGURATION:
    EVA_LLM_PRIMARY_PROVIDER=openai  # or: gemini
"""

from enum import StrEnum
from typing import Optional

from eva.config import Settings, get_settings
from eva.config.logging_config import get_logger
from eva.infrastructure.llm.provider import GenerationService

logger = get_logger(__name__)


class GenerationProviderType(StrEnum):
    """Supported generation provider types."""

    OPENAI = "openai"
    GEMINI = "gemini"


def get_generation_service(
    settings: Optional[Settings] = None,
    provider_type: Optional[GenerationProviderType] = None,
) -> GenerationService:
    """
    Create a generation provider from settings.

    Every call builds a new provider. Provider type defaults to the
    EVA_LLM_PRIMARY_PROVIDER setting.

    Args:
        settings: Application settings (defaults to global settings)
        provider_type: Override provider type

    Returns:
        Configured generation provider

    Example:
        service = get_generation_service(settings)
        service = get_generation_service(settings, GenerationProviderType.GEMINI)
    """
    settings = settings or get_settings()

    if provider_type is None:
        provider_type = GenerationProviderType(settings.llm_primary_provider)

    provider = _create_provider(provider_type, settings)

    logger.info(
        "Generation provider initialized",
        provider=provider_type.value,
        configured=provider.is_configured(),
    )

    return provider


def _create_provider(
    provider_type: GenerationProviderType,
    settings: Settings,
) -> GenerationService:
    """Create provider instance by type."""
    if provider_type == GenerationProviderType.OPENAI:
        from eva.infrastructure.llm.openai_provider import OpenAIProvider
        return OpenAIProvider(settings=settings.openai)

    if provider_type == GenerationProviderType.GEMINI:
        from eva.infrastructure.llm.gemini_provider import GeminiProvider
        return GeminiProvider(settings=settings.gemini)

    raise ValueError(f"Unknown provider type: {provider_type}")
