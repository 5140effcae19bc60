"""
Unit Tests for Modality Router

Tests instruction assembly, style adaptation, exercise suggestions
and the fallback path when generation fails.
"""

import random
from dataclasses import replace

import pytest

from eva.domain.enums.therapeutic_modality import ChangeBelief, TherapeuticModality
from eva.domain.models.message import EmotionalState, Message
from eva.domain.models.preference_profile import (
    CommunicationStyle,
    TherapeuticPreferenceProfile,
)
from eva.infrastructure.llm.provider import ContentFilterError, GenerationUnavailable
from eva.services.modality.modality_config import (
    FALLBACK_RESPONSES,
    communication_style,
    fallback_response,
    get_modality_config,
)
from eva.services.modality.router import ModalityRouter
from eva.services.modality.style_adapter import StyleAdapter
from eva.services.prompt.prompt_builder import PromptBuilder, RoutingContext


def _profile(modality: TherapeuticModality, comfort: int = 5) -> TherapeuticPreferenceProfile:
    return TherapeuticPreferenceProfile(
        primary_modality=modality,
        secondary_modality=TherapeuticModality.MINDFULNESS,
        vulnerability_comfort=comfort,
        change_beliefs=ChangeBelief.GRADUAL,
        communication_style=communication_style(modality),
        confidence=0.6,
    )


class TestStyleTable:
    """Tests for per-modality communication styles."""

    def test_humanistic_style(self) -> None:
        assert communication_style(TherapeuticModality.HUMANISTIC).as_tuple() == (4, 9, 3, 5)

    def test_every_modality_has_config(self) -> None:
        for modality in TherapeuticModality:
            config = get_modality_config(modality)
            assert config.modality == modality
            assert config.instruction
            assert config.exercises

    def test_fallback_for_modality_without_sentence(self) -> None:
        assert fallback_response(TherapeuticModality.SOMATIC) == (
            FALLBACK_RESPONSES[TherapeuticModality.HUMANISTIC]
        )


class TestInstructions:
    """Tests for directive and safety clauses."""

    def test_humanistic_clauses(self) -> None:
        request = ModalityRouter().build_instructions(_profile(TherapeuticModality.HUMANISTIC))

        text = request.system_instructions
        assert text.startswith(get_modality_config(TherapeuticModality.HUMANISTIC).instruction)
        assert PromptBuilder.NON_DIRECTIVE_CLAUSE in text
        assert PromptBuilder.HIGH_WARMTH_CLAUSE in text
        assert PromptBuilder.CONTEMPLATIVE_CLAUSE not in text
        assert PromptBuilder.SAFETY_CLAUSE not in text

    @pytest.mark.parametrize("modality", [TherapeuticModality.MINDFULNESS, TherapeuticModality.SOMATIC])
    def test_slow_pace_adds_contemplative_clause(self, modality: TherapeuticModality) -> None:
        request = ModalityRouter().build_instructions(_profile(modality))

        assert PromptBuilder.CONTEMPLATIVE_CLAUSE in request.system_instructions

    def test_pace_four_has_no_contemplative_clause(self) -> None:
        style = CommunicationStyle(directness=5, warmth=5, structure=5, pace=4)

        text = PromptBuilder().build_instructions("Base.", style, RoutingContext())

        assert PromptBuilder.CONTEMPLATIVE_CLAUSE not in text
        assert text == "Base."

    def test_cbt_is_direct(self) -> None:
        request = ModalityRouter().build_instructions(_profile(TherapeuticModality.CBT))

        assert PromptBuilder.DIRECT_CLAUSE in request.system_instructions
        assert PromptBuilder.NON_DIRECTIVE_CLAUSE not in request.system_instructions

    def test_crisis_indicators_add_safety_clause(self) -> None:
        context = RoutingContext(crisis_indicators=True)

        request = ModalityRouter().build_instructions(_profile(TherapeuticModality.CBT), context)

        assert PromptBuilder.SAFETY_CLAUSE in request.system_instructions
        assert PromptBuilder.HIGH_VULNERABILITY_CLAUSE not in request.system_instructions

    def test_high_vulnerability_adds_both_clauses(self) -> None:
        context = RoutingContext(vulnerability_level=8)

        request = ModalityRouter().build_instructions(_profile(TherapeuticModality.CBT), context)

        assert PromptBuilder.SAFETY_CLAUSE in request.system_instructions
        assert PromptBuilder.HIGH_VULNERABILITY_CLAUSE in request.system_instructions

    def test_history_is_capped_at_ten_messages(self) -> None:
        history = [Message.user(f"message {i}") for i in range(15)]

        request = ModalityRouter().build_instructions(
            _profile(TherapeuticModality.CBT), history=history, user_message="now"
        )

        assert len(request.conversation_history) == 10
        assert request.conversation_history[0]["content"] == "message 5"
        messages = request.to_messages()
        assert messages[0]["role"] == "system"
        assert messages[-1] == {"role": "user", "content": "now"}


class TestStyleAdapter:
    """Tests for lexical style adaptation."""

    def test_low_directness_softens(self, rng: random.Random) -> None:
        adapter = StyleAdapter(rng)
        style = communication_style(TherapeuticModality.MINDFULNESS)

        result = adapter.adapt("You should rest. You need to sleep.", style)

        assert result == "You should rest. You need to sleep."
        assert adapter.soften("You should rest.") == "You might consider rest."

    def test_high_directness_hardens(self, rng: random.Random) -> None:
        adapter = StyleAdapter(rng)
        style = communication_style(TherapeuticModality.CBT)

        result = adapter.adapt("You might consider a walk. I wonder if that helps.", style)

        assert result == "You should a walk. I recommend that helps."

    def test_warm_phrase_inserted_after_first_sentence(self) -> None:
        style = communication_style(TherapeuticModality.HUMANISTIC)
        expected_phrase = random.Random(99).choice(StyleAdapter.WARM_PHRASES)

        result = StyleAdapter(random.Random(99)).adapt("First point. Second point.", style)

        assert result == f"First point. {expected_phrase}. Second point."

    def test_warm_phrase_is_reproducible(self) -> None:
        style = communication_style(TherapeuticModality.HUMANISTIC)
        text = "One. Two. Three."

        first = StyleAdapter(random.Random(7)).adapt(text, style)
        second = StyleAdapter(random.Random(7)).adapt(text, style)

        assert first == second

    def test_existing_marker_skips_warmth(self, rng: random.Random) -> None:
        style = communication_style(TherapeuticModality.HUMANISTIC)
        text = "I hear you. That must be hard."

        assert StyleAdapter(rng).adapt(text, style) == text

    def test_single_sentence_unchanged(self, rng: random.Random) -> None:
        style = communication_style(TherapeuticModality.HUMANISTIC)

        assert StyleAdapter(rng).adapt("Just one thought", style) == "Just one thought"


class TestRouting:
    """Tests for the generate-then-adapt pipeline."""

    async def test_generated_text_is_adapted(
        self, rng: random.Random, generation_factory
    ) -> None:
        generation = generation_factory(replies=["You should rest. Sleep helps."])
        router = ModalityRouter(generation=generation, rng=rng)

        response = await router.route("I'm tired", _profile(TherapeuticModality.HUMANISTIC))

        assert response.content.startswith("You might consider rest. ")
        assert response.content.endswith("Sleep helps.")
        assert response.modality == TherapeuticModality.HUMANISTIC
        assert response.used_fallback is False
        assert len(generation.requests) == 1
        assert generation.requests[0].user_message == "I'm tired"

    @pytest.mark.parametrize("error", [
        GenerationUnavailable("boom", provider="fake"),
        ContentFilterError("fake", "safety"),
    ])
    async def test_generation_failure_uses_fallback(
        self, rng: random.Random, generation_factory, error: Exception
    ) -> None:
        router = ModalityRouter(generation=generation_factory(error=error), rng=rng)

        response = await router.route("hello", _profile(TherapeuticModality.CBT))

        assert response.used_fallback is True
        assert response.content == FALLBACK_RESPONSES[TherapeuticModality.CBT]

    async def test_generation_timeout_uses_fallback(
        self, rng: random.Random, generation_factory
    ) -> None:
        router = ModalityRouter(generation=generation_factory(error=TimeoutError()), rng=rng)

        response = await router.route("hello", _profile(TherapeuticModality.MINDFULNESS))

        assert response.used_fallback is True
        assert response.content == fallback_response(TherapeuticModality.MINDFULNESS)

    async def test_empty_generation_uses_fallback(
        self, rng: random.Random, generation_factory
    ) -> None:
        router = ModalityRouter(generation=generation_factory(replies=["   "]), rng=rng)

        response = await router.route("hello", _profile(TherapeuticModality.HUMANISTIC))

        assert response.used_fallback is True
        # Fallback already carries a warm marker, so no phrase is added
        assert response.content == FALLBACK_RESPONSES[TherapeuticModality.HUMANISTIC]

    async def test_response_carries_profile_depth(
        self, rng: random.Random, fake_generation
    ) -> None:
        router = ModalityRouter(generation=fake_generation, rng=rng)

        response = await router.route("hi", _profile(TherapeuticModality.CBT, comfort=8))

        assert response.conversation_depth == "deep"
        assert response.confidence == 0.6
        assert response.to_dict()["modality"] == "cbt"


class TestSuggestedExercises:

    def test_first_three_modality_exercises(self) -> None:
        config = get_modality_config(TherapeuticModality.CBT)

        exercises = ModalityRouter().suggested_exercises(config)

        assert exercises == list(config.exercises[:3])

    def test_emotion_extras_never_exceed_three(self) -> None:
        config = get_modality_config(TherapeuticModality.CBT)
        state = EmotionalState(primary_emotion="Anxious", intensity=6)

        exercises = ModalityRouter().suggested_exercises(config, state)

        assert len(exercises) == 3
        assert exercises == list(config.exercises[:3])

    def test_anxious_extras_fill_short_lists(self) -> None:
        config = replace(get_modality_config(TherapeuticModality.SOMATIC), exercises=("body_scan",))
        state = EmotionalState(primary_emotion="anxious and overwhelmed", intensity=6)

        exercises = ModalityRouter().suggested_exercises(config, state)

        assert exercises == ["body_scan", "breathing_exercises", "grounding_techniques"]
