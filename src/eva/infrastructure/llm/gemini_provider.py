"""
Google Gemini Generation Provider

Implementation of the generation service interface for the Google Gemini API.
"""

import time
from typing import Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.generativeai.types import GenerationConfig
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from eva.config import get_settings
from eva.config.settings import GeminiSettings
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
    google_exceptions.ResourceExhausted,
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
)


class GeminiProvider(GenerationService):
    """
    Google Gemini API provider implementation.

    System instructions are passed natively; prior history is replayed
    as chat turns with assistant messages mapped to the "model" role.

    Usage:
        provider = GeminiProvider()
        result = await provider.generate(request)
    """

    # Safety settings for mental health context
    SAFETY_SETTINGS = [
        {
            "category": "HARM_CATEGORY_HARASSMENT",
            "threshold": "BLOCK_MEDIUM_AND_ABOVE",
        },
        {
            "category": "HARM_CATEGORY_HATE_SPEECH",
            "threshold": "BLOCK_MEDIUM_AND_ABOVE",
        },
        {
            "category": "HARM_CATEGORY_SEXUALLY_EXPLICIT",
            "threshold": "BLOCK_MEDIUM_AND_ABOVE",
        },
        {
            "category": "HARM_CATEGORY_DANGEROUS_CONTENT",
            "threshold": "BLOCK_ONLY_HIGH",  # Crisis language must reach the model
        },
    ]

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        settings: Optional[GeminiSettings] = None,
    ) -> None:
        """
        Initialize Gemini provider.

        Args:
            api_key: Gemini API key (defaults to settings)
            model: Model identifier (defaults to settings)
            settings: Gemini settings group (defaults to global settings)
        """
        settings = settings or get_settings().gemini

        self._api_key = api_key or settings.api_key.get_secret_value()
        self._default_model = model or settings.model
        self._configured = False

        if self._api_key and self._api_key != "CHANGE_ME":
            genai.configure(api_key=self._api_key)
            self._configured = True

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return self._default_model

    def is_configured(self) -> bool:
        return self._configured

    async def generate(
        self,
        request: GenerationRequest,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> GenerationResult:
        """
        Generate completion using Gemini API.

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
                "Gemini API key not configured",
                provider=self.provider_name,
            )

        model_name = model or self._default_model
        start_time = time.time()

        try:
            gemini_model = genai.GenerativeModel(
                model_name=model_name,
                safety_settings=self.SAFETY_SETTINGS,
                system_instruction=request.system_instructions,
            )
            generation_config = GenerationConfig(
                max_output_tokens=max_tokens or request.max_tokens,
                temperature=temperature if temperature is not None else request.temperature,
            )
            response = await self._send(
                gemini_model,
                history=self.to_gemini_history(request.conversation_history),
                message=request.user_message,
                generation_config=generation_config,
            )
        except google_exceptions.ResourceExhausted as e:
            logger.warning("Gemini rate limit hit", error=str(e))
            raise RateLimitError(
                provider=self.provider_name,
                retry_after_seconds=60,
            ) from e
        except Exception as e:
            error_msg = str(e).lower()
            if "safety" in error_msg or "blocked" in error_msg:
                raise ContentFilterError(
                    provider=self.provider_name,
                    filter_reason=str(e),
                ) from e

            logger.error("Gemini API error", error_type=type(e).__name__)
            raise GenerationUnavailable(
                f"Gemini API error: {e}",
                provider=self.provider_name,
                is_retryable=isinstance(e, _TRANSIENT_ERRORS),
                original_error=e,
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)

        if response.prompt_feedback and response.prompt_feedback.block_reason:
            raise ContentFilterError(
                provider=self.provider_name,
                filter_reason=str(response.prompt_feedback.block_reason),
            )

        try:
            content = response.text or ""
        except ValueError as e:
            # Raised when every candidate was blocked
            raise ContentFilterError(provider=self.provider_name, filter_reason=str(e)) from e

        usage_metadata = getattr(response, "usage_metadata", None)
        usage = {
            "prompt_tokens": getattr(usage_metadata, "prompt_token_count", 0) or 0,
            "completion_tokens": getattr(usage_metadata, "candidates_token_count", 0) or 0,
            "total_tokens": getattr(usage_metadata, "total_token_count", 0) or 0,
        }

        logger.debug(
            "Gemini completion generated",
            model=model_name,
            latency_ms=latency_ms,
        )

        return GenerationResult(
            content=content,
            finish_reason="stop",
            usage=usage,
            model=model_name,
            provider=self.provider_name,
            latency_ms=latency_ms,
            raw_response=response,
        )

    @staticmethod
    def to_gemini_history(conversation_history: list[dict]) -> list[dict]:
        """Convert chat-format history to Gemini content turns."""
        history = []
        for message in conversation_history:
            role = message.get("role")
            if role == "system":
                continue
            history.append({
                "role": "model" if role == "assistant" else "user",
                "parts": [message.get("content", "")],
            })
        return history

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True,
    )
    async def _send(self, gemini_model, *, history, message, generation_config):
        chat = gemini_model.start_chat(history=history)
        return await chat.send_message_async(
            message,
            generation_config=generation_config,
        )

