"""
Generation Service Interface

Defines the contract for all text generation providers.
Enables swapping between providers without changing service code.

ARCHITECTURE: All generation goes through this interface. Any failure,
including a timeout, surfaces as GenerationUnavailable so callers can
fall back to fixed text.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from eva.domain.errors import EvaError
from eva.services.prompt.prompt_builder import GenerationRequest


@dataclass
class GenerationResult:
    """
    Result from a generation provider.

    Attributes:
        content: Generated text
        finish_reason: Why generation stopped
        usage: Token usage statistics
        model: Model identifier used
        provider: Provider name
        latency_ms: Response time in milliseconds
        raw_response: Original API response (for debugging)
    """

    content: str
    finish_reason: str = "stop"
    usage: dict = field(default_factory=dict)
    model: str = ""
    provider: str = ""
    latency_ms: int = 0
    raw_response: Optional[Any] = None

    @property
    def total_tokens(self) -> int:
        """Get total tokens used."""
        return self.usage.get("total_tokens", 0)

    def to_dict(self) -> dict:
        """Serialize to dictionary (excluding raw_response)."""
        return {
            "content": self.content,
            "finish_reason": self.finish_reason,
            "usage": self.usage,
            "model": self.model,
            "provider": self.provider,
            "latency_ms": self.latency_ms,
        }


class GenerationService(ABC):
    """
    Abstract generation provider interface.

    Implementations turn a GenerationRequest (system instructions,
    recent history, current message) into text.

    ARCHITECTURE: This abstraction enables:
    1. Easy provider switching (OpenAI <-> Gemini)
    2. Fakes in tests
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get provider name for logging/tracking."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Get default model identifier."""

    @abstractmethod
    async def generate(
        self,
        request: GenerationRequest,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> GenerationResult:
        """
        Generate text for a request.

        Args:
            request: Generation request
            model: Optional model override
            max_tokens: Optional max tokens override
            temperature: Optional temperature override

        Returns:
            GenerationResult with generated content

        Raises:
            GenerationUnavailable: On timeout or any provider error
        """

    @abstractmethod
    def is_configured(self) -> bool:
        """
        Check if provider is properly configured.

        Returns:
            True if API key and settings are configured
        """


class GenerationUnavailable(EvaError):
    """Generation failed or timed out."""

    def __init__(
        self,
        message: str,
        provider: str,
        is_retryable: bool = False,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.is_retryable = is_retryable
        self.original_error = original_error


class RateLimitError(GenerationUnavailable):
    """Rate limit exceeded error."""

    def __init__(
        self,
        provider: str,
        retry_after_seconds: Optional[int] = None,
    ) -> None:
        super().__init__(
            f"Rate limit exceeded for {provider}",
            provider=provider,
            is_retryable=True,
        )
        self.retry_after_seconds = retry_after_seconds


class ContentFilterError(GenerationUnavailable):
    """Content was filtered by provider's safety systems."""

    def __init__(self, provider: str, filter_reason: str = "") -> None:
        super().__init__(
            f"Content filtered by {provider}: {filter_reason}",
            provider=provider,
            is_retryable=False,
        )
        self.filter_reason = filter_reason
