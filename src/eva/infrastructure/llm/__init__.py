"""Generation provider abstraction package."""

from eva.infrastructure.llm.provider import (
    ContentFilterError,
    GenerationResult,
    GenerationService,
    GenerationUnavailable,
    RateLimitError,
)
from eva.infrastructure.llm.provider_factory import (
    GenerationProviderType,
    get_generation_service,
)

__all__ = [
    # Base types
    "GenerationService",
    "GenerationResult",
    "GenerationUnavailable",
    "RateLimitError",
    "ContentFilterError",
    # Factory
    "get_generation_service",
    "GenerationProviderType",
]
