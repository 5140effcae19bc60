"""
OpenAI Generation Provider

Implementation of the generation service interface for the OpenAI API.
Includes retries on transient failures and error wrapping.
"""

import time
from typing import Optional

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    InternalServerError,
    RateLimitError as OpenAIRateLimitError,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from eva.config import get_settings
from eva.config.settings import OpenAISettings
from eva.config.logging_config import get_logger
from eva.infrastructure.llm.provider import (
    ContentFilterError,
    GenerationResult,
    GenerationService,
    GenerationUnavailable,
    RateLimitError,
)
from eva.services.prompt.prompt_builder import GenerationRequest

logger = get_logger(__name__)

_TRANSIENT_ERRORS = (
    OpenAIRateLimitError,
    APITimeoutError,
    APIConnectionError,
    InternalServerError,
)


class OpenAIProvider(GenerationService):
    """
    OpenAI API provider implementation.

    Supports chat completion models with:
    - Async operation
    - Automatic retries with exponential backoff on transient errors
    - Rate limit handling
    - Content filter detection

    Usage:
        provider = OpenAIProvider()
        result = await provider.generate(request)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout_seconds: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
        settings: Optional[OpenAISettings] = None,
    ) -> None:
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (defaults to settings)
            model: Model identifier (defaults to settings)
            max_tokens: Default max tokens (defaults to settings)
            temperature: Default temperature (defaults to settings)
            timeout_seconds: Request timeout (defaults to settings)
            client: Pre-built client (tests)
            settings: OpenAI settings group (defaults to global settings)
        """
        settings = settings or get_settings().openai

        self._api_key = api_key or settings.api_key.get_secret_value()
        self._default_model = model or settings.model
        self._default_max_tokens = max_tokens or settings.max_tokens
        self._default_temperature = (
            temperature if temperature is not None else settings.temperature
        )
        self._timeout = timeout_seconds or settings.timeout_seconds

        self._client = client

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return self._default_model

    def is_configured(self) -> bool:
        """Check if API key is configured."""
        return self._client is not None or bool(
            self._api_key and self._api_key != "sk-CHANGE_ME"
        )

    def _get_client(self) -> AsyncOpenAI:
        """Get or create async client."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout)
        return self._client

    async def generate(
        self,
        request: GenerationRequest,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> GenerationResult:
        """
        Generate completion using OpenAI API.

        Args:
            request: Generation request
            model: Model override
            max_tokens: Max tokens override
            temperature: Temperature override

        Returns:
            GenerationResult with generated content
        """
        if not self.is_configured():
            raise GenerationUnavailable(
                "OpenAI API key not configured",
                provider=self.provider_name,
            )

        model_name = model or self._default_model
        start_time = time.time()

        try:
            response = await self._complete(
                model=model_name,
                messages=request.to_messages(),
                max_tokens=max_tokens or request.max_tokens or self._default_max_tokens,
                temperature=(
                    temperature if temperature is not None
                    else request.temperature if request.temperature is not None
                    else self._default_temperature
                ),
            )
        except OpenAIRateLimitError as e:
            logger.warning("OpenAI rate limit hit", error=str(e))
            raise RateLimitError(
                provider=self.provider_name,
                retry_after_seconds=60,
            ) from e
        except APIError as e:
            logger.error("OpenAI API error", error_type=type(e).__name__)
            raise GenerationUnavailable(
                f"OpenAI API error: {e}",
                provider=self.provider_name,
                is_retryable=isinstance(e, _TRANSIENT_ERRORS),
                original_error=e,
            ) from e
        except Exception as e:
            logger.error("Unexpected OpenAI error", error_type=type(e).__name__)
            raise GenerationUnavailable(
                f"Unexpected error: {e}",
                provider=self.provider_name,
                original_error=e,
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)

        choice = response.choices[0]
        content = choice.message.content or ""
        finish_reason = choice.finish_reason or "stop"

        if finish_reason == "content_filter":
            raise ContentFilterError(
                provider=self.provider_name,
                filter_reason="Content was filtered by OpenAI safety systems",
            )

        usage = {
            "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
            "completion_tokens": response.usage.completion_tokens if response.usage else 0,
            "total_tokens": response.usage.total_tokens if response.usage else 0,
        }

        logger.debug(
            "OpenAI completion generated",
            model=model_name,
            usage_total=usage.get("total_tokens"),
            latency_ms=latency_ms,
        )

        return GenerationResult(
            content=content,
            finish_reason=finish_reason,
            usage=usage,
            model=model_name,
            provider=self.provider_name,
            latency_ms=latency_ms,
            raw_response=response,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True,
    )
    async def _complete(self, **kwargs):
        client = self._get_client()
        return await client.chat.completions.create(
            presence_penalty=0.1,
            frequency_penalty=0.1,
            **kwargs,
        )

