"""
Integration Tests for the Conversation Flow

Runs whole messages through the orchestrator with in-memory
collaborators: crisis short-circuit, normal routing, escalation
context and belief store wiring.
"""

import random
from unittest.mock import AsyncMock

import pytest

from eva.config import Settings
from eva.config.settings import BeliefStoreSettings
from eva.domain.enums.therapeutic_modality import TherapeuticModality
from eva.domain.models.message import EmotionalState, Message
from eva.domain.models.risk_models import CrisisRiskLevel
from eva.infrastructure.belief_store.client import Readiness
from eva.infrastructure.llm.provider import GenerationUnavailable
from eva.services.modality.router import ModalityRouter
from eva.services.orchestration.conversation_orchestrator import ConversationOrchestrator
from eva.services.prompt.prompt_builder import PromptBuilder
from eva.services.safety.safety_plan_generator import CRISIS_RESOURCES, SafetyPlanGenerator


@pytest.fixture
def orchestrator(test_settings: Settings, fake_generation, rng: random.Random):
    return ConversationOrchestrator(
        router=ModalityRouter(generation=fake_generation, rng=rng),
        settings=test_settings,
    )


class TestCrisisShortCircuit:
    """A HIGH or CRITICAL message never reaches generation."""

    async def test_critical_message_gets_crisis_response(
        self, orchestrator: ConversationOrchestrator, fake_generation
    ) -> None:
        response = await orchestrator.process(
            "I want to end my life",
            user_id="user-1",
            emotional_state=EmotionalState(primary_emotion="despair", intensity=9),
        )

        assert response.crisis_assessment.risk_score == 20
        assert response.crisis_assessment.risk_level == CrisisRiskLevel.CRITICAL
        assert response.content == SafetyPlanGenerator.CRISIS_MESSAGE
        assert response.requires_immediate_attention
        assert response.crisis_response.resources == CRISIS_RESOURCES
        assert response.suggested_exercises == ["safety_planning", "grounding_techniques"]
        assert response.confidence == 1.0
        assert fake_generation.requests == []

        data = response.to_dict()
        assert data["modality"] == "crisis_response"
        assert data["conversation_depth"] == "crisis"

    async def test_safety_plan_follows_history_modality(
        self, orchestrator: ConversationOrchestrator
    ) -> None:
        history = [Message.user("I try to notice the present moment and breathe, calm and aware")]

        response = await orchestrator.process("I keep cutting myself and I want to die", history=history)

        plan = response.safety_plan
        assert plan.modality == TherapeuticModality.MINDFULNESS.value
        assert any(s.startswith("Grounding") for s in plan.coping_strategies)
        assert any(s.startswith("Breathing") for s in plan.coping_strategies)

    async def test_recent_incident_promotes_moderate(
        self, test_settings: Settings, fake_generation, rng: random.Random
    ) -> None:
        incidents = AsyncMock()
        incidents.count_recent_high_risk_incidents.return_value = 1
        orchestrator = ConversationOrchestrator(
            router=ModalityRouter(generation=fake_generation, rng=rng),
            incident_history=incidents,
            settings=test_settings,
        )

        response = await orchestrator.process("I feel hopeless", user_id="user-1")

        assert response.crisis_assessment.risk_level == CrisisRiskLevel.HIGH
        assert "recent_crisis_history" in response.crisis_assessment.risk_factors
        assert fake_generation.requests == []
        incidents.count_recent_high_risk_incidents.assert_awaited_once_with("user-1", 24)


class TestNormalRouting:

    async def test_low_risk_message_is_routed(
        self, orchestrator: ConversationOrchestrator, fake_generation, cbt_history
    ) -> None:
        response = await orchestrator.process(
            "Can we work on a plan?", user_id="user-1", history=cbt_history
        )

        assert response.crisis_assessment.risk_level == CrisisRiskLevel.LOW
        assert response.modality == TherapeuticModality.CBT
        assert response.confidence == 0.8
        assert not response.requires_immediate_attention
        request = fake_generation.requests[0]
        assert PromptBuilder.SAFETY_CLAUSE not in request.system_instructions
        assert request.user_message == "Can we work on a plan?"

    async def test_moderate_message_adds_safety_clause(
        self, orchestrator: ConversationOrchestrator, fake_generation
    ) -> None:
        response = await orchestrator.process("Everything feels hopeless", user_id="user-1")

        assert response.crisis_assessment.risk_level == CrisisRiskLevel.MODERATE
        assert response.modality == TherapeuticModality.HUMANISTIC
        assert PromptBuilder.SAFETY_CLAUSE in fake_generation.requests[0].system_instructions

    async def test_crisis_words_in_history_add_safety_clause(
        self, orchestrator: ConversationOrchestrator, fake_generation
    ) -> None:
        history = [Message.user("Last week I said I want to die"), Message.assistant("I'm here.")]

        response = await orchestrator.process("Hello again", history=history)

        assert response.crisis_assessment.risk_level == CrisisRiskLevel.LOW
        assert PromptBuilder.SAFETY_CLAUSE in fake_generation.requests[0].system_instructions

    async def test_high_intensity_adds_vulnerability_clause(
        self, orchestrator: ConversationOrchestrator, fake_generation
    ) -> None:
        await orchestrator.process(
            "Today was a lot", emotional_state=EmotionalState(primary_emotion="sad", intensity=8)
        )

        instructions = fake_generation.requests[0].system_instructions
        assert PromptBuilder.HIGH_VULNERABILITY_CLAUSE in instructions

    async def test_incident_lookup_failure_counts_as_none(
        self, test_settings: Settings, fake_generation, rng: random.Random
    ) -> None:
        incidents = AsyncMock()
        incidents.count_recent_high_risk_incidents.side_effect = RuntimeError("db down")
        orchestrator = ConversationOrchestrator(
            router=ModalityRouter(generation=fake_generation, rng=rng),
            incident_history=incidents,
            settings=test_settings,
        )

        response = await orchestrator.process("I feel hopeless", user_id="user-1")

        assert response.crisis_assessment.risk_level == CrisisRiskLevel.MODERATE
        assert len(fake_generation.requests) == 1

    async def test_generation_failure_still_answers(
        self, test_settings: Settings, generation_factory, rng: random.Random
    ) -> None:
        generation = generation_factory(error=GenerationUnavailable("down", provider="fake"))
        orchestrator = ConversationOrchestrator(
            router=ModalityRouter(generation=generation, rng=rng),
            settings=test_settings,
        )

        response = await orchestrator.process("Can we talk?")

        assert response.used_fallback is True
        assert response.content


class TestBuild:
    """Tests for belief store readiness wiring."""

    @pytest.fixture
    def store_settings(self) -> Settings:
        return Settings(belief_store=BeliefStoreSettings(enabled=True))

    async def test_not_ready_store_is_left_out(self, store_settings: Settings, fake_generation) -> None:
        store = AsyncMock()
        store.connect.return_value = Readiness(ready=False, detail="ConnectError")

        orchestrator = await ConversationOrchestrator.build(
            settings=store_settings, generation=fake_generation, belief_store=store
        )

        assert orchestrator.preferences.has_belief_store is False
        store.aclose.assert_not_awaited()

    async def test_ready_store_is_wired_in(self, store_settings: Settings, fake_generation) -> None:
        store = AsyncMock()
        store.connect.return_value = Readiness(ready=True)
        store.get_aggregated_preferences.return_value = None

        orchestrator = await ConversationOrchestrator.build(
            settings=store_settings, generation=fake_generation, belief_store=store
        )
        response = await orchestrator.process("Hi there", user_id="user-1")

        assert orchestrator.preferences.has_belief_store is True
        store.ensure_self_model.assert_awaited_once_with("user-1")
        assert response.profile.source.value == "local"
        await orchestrator.shutdown()

    async def test_disabled_store_is_never_contacted(
        self, test_settings: Settings, fake_generation
    ) -> None:
        store = AsyncMock()

        orchestrator = await ConversationOrchestrator.build(
            settings=test_settings, generation=fake_generation, belief_store=store
        )

        assert orchestrator.preferences.has_belief_store is False
        store.connect.assert_not_awaited()
