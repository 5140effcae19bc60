"""
Modality Router

Turns a preference profile into a generation request, calls the
generation service and adapts the result to the person's
communication style.

SAFETY: The router is only reached for LOW and MODERATE crisis
assessments. It never decides on crisis handling itself; the
routing context only adds a safety clause to the instructions.

ARCHITECTURE: Generation failures never propagate. A fixed
modality-specific sentence replaces the generated text.
"""

import random
from typing import Optional, Sequence

from eva.config.logging_config import get_logger
from eva.domain.models.message import EmotionalState, Message
from eva.domain.models.preference_profile import (
    CommunicationStyle,
    TherapeuticPreferenceProfile,
)
from eva.domain.models.therapeutic_response import TherapeuticResponse
from eva.infrastructure.llm.provider import GenerationService, GenerationUnavailable
from eva.services.modality.modality_config import (
    ModalityConfig,
    fallback_response,
    get_modality_config,
)
from eva.services.modality.style_adapter import StyleAdapter
from eva.services.prompt.prompt_builder import (
    GenerationRequest,
    PromptBuilder,
    RoutingContext,
)

logger = get_logger(__name__)


class ModalityRouter:
    """
    Routes a message to the profile's primary modality.

    Pipeline:
    1. Look up the modality configuration
    2. Build instructions (base fragment, style clauses, safety clause)
    3. Generate with the last 10 history messages and the new message
    4. Fall back to fixed text on any generation failure
    5. Adapt phrasing to the communication style

    Usage:
        router = ModalityRouter(generation=provider, rng=random.Random(7))
        response = await router.route(message, profile, history, context)
    """

    MAX_EXERCISES: int = 3

    # Extra exercises keyed by an emotion label found in the emotional state
    EMOTION_EXERCISES: tuple[tuple[str, tuple[str, ...]], ...] = (
        ("anxious", ("breathing_exercises", "grounding_techniques")),
        ("overwhelmed", ("mindful_breaks", "self_compassion_pause")),
    )

    def __init__(
        self,
        generation: Optional[GenerationService] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        adapter: Optional[StyleAdapter] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize router.

        Args:
            generation: Generation service (None always uses fallback text)
            prompt_builder: Request builder (defaults to PromptBuilder())
            adapter: Style adapter (defaults to one driven by `rng`)
            rng: Random source for style adaptation
        """
        self._generation = generation
        self._prompt_builder = prompt_builder or PromptBuilder()
        self._adapter = adapter or StyleAdapter(rng)

    def build_instructions(
        self,
        profile: TherapeuticPreferenceProfile,
        context: Optional[RoutingContext] = None,
        history: Sequence[Message] = (),
        user_message: str = "",
    ) -> GenerationRequest:
        """
        Build the generation request for a profile.

        Args:
            profile: Preference profile
            context: Routing context (crisis flags, vulnerability)
            history: Conversation history, oldest first
            user_message: Current user message

        Returns:
            GenerationRequest
        """
        config = get_modality_config(profile.primary_modality)
        return self._prompt_builder.build(
            instruction=config.instruction,
            style=profile.communication_style,
            context=context,
            history=history,
            user_message=user_message,
        )

    def adapt(self, text: str, style: Optional[CommunicationStyle]) -> str:
        """Adapt generated text to a communication style."""
        return self._adapter.adapt(text, style)

    def suggested_exercises(
        self,
        config: ModalityConfig,
        emotional_state: Optional[EmotionalState] = None,
    ) -> list[str]:
        """Modality exercises plus emotion-specific extras, first three."""
        exercises = list(config.exercises)
        if emotional_state is not None:
            for label, extras in self.EMOTION_EXERCISES:
                if emotional_state.describes(label):
                    exercises.extend(extras)
        return exercises[: self.MAX_EXERCISES]

    async def route(
        self,
        user_message: str,
        profile: TherapeuticPreferenceProfile,
        history: Sequence[Message] = (),
        context: Optional[RoutingContext] = None,
    ) -> TherapeuticResponse:
        """
        Produce a modality-adapted response.

        Args:
            user_message: Current user message
            profile: Preference profile
            history: Conversation history, oldest first
            context: Routing context

        Returns:
            TherapeuticResponse (never raises for generation failures)
        """
        context = context or RoutingContext()
        config = get_modality_config(profile.primary_modality)
        request = self.build_instructions(profile, context, history, user_message)

        text, used_fallback = await self._generate(request, config)
        content = self.adapt(text, profile.communication_style)

        logger.info(
            "Message routed",
            modality=config.modality.value,
            used_fallback=used_fallback,
            safety_clause=context.requires_safety_clause,
            response_length=len(content),
        )

        return TherapeuticResponse(
            content=content,
            modality=config.modality,
            suggested_exercises=self.suggested_exercises(config, context.emotional_state),
            conversation_depth=profile.conversation_depth,
            confidence=profile.confidence,
            profile=profile,
            used_fallback=used_fallback,
        )

    async def _generate(
        self,
        request: GenerationRequest,
        config: ModalityConfig,
    ) -> tuple[str, bool]:
        if self._generation is None:
            return fallback_response(config.modality), True

        try:
            result = await self._generation.generate(request)
        except GenerationUnavailable as e:
            logger.warning(
                "Generation failed, using fallback response",
                provider=e.provider,
                error_type=type(e).__name__,
            )
            return fallback_response(config.modality), True
        except TimeoutError:
            logger.warning("Generation timed out, using fallback response")
            return fallback_response(config.modality), True

        text = (result.content or "").strip()
        if not text:
            logger.warning("Generation returned empty text, using fallback response")
            return fallback_response(config.modality), True

        return text, False
