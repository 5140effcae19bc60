"""
Conversation Orchestrator

Coordinates the per-message pipeline from user input to response.

ARCHITECTURE: This is the main orchestration layer that connects:
Crisis assessment → (safety plan | preference inference → routing)

SAFETY: Crisis assessment runs first and unconditionally. A HIGH or
CRITICAL assessment short-circuits everything else; the safety plan
generator is then the only response source and the generation
service is never called.

CONCURRENCY: The orchestrator holds no per-conversation state.
Callers serialize messages within one conversation.
"""

import random
from typing import Optional, Sequence
from uuid import uuid4

from eva.config import Settings, get_settings
from eva.config.logging_config import correlation_context, get_logger
from eva.domain.models.message import EmotionalState, Message
from eva.domain.models.risk_models import CrisisAssessment, CrisisRiskLevel
from eva.domain.models.therapeutic_response import TherapeuticResponse
from eva.infrastructure.belief_store.client import BeliefStore, HttpBeliefStore
from eva.infrastructure.llm.provider import GenerationService
from eva.infrastructure.llm.provider_factory import get_generation_service
from eva.services.dialectic.dialectic_manager import DialecticSessionManager
from eva.services.modality.router import ModalityRouter
from eva.services.preference.inference_engine import PreferenceInferenceEngine
from eva.services.prompt.prompt_builder import PromptBuilder, RoutingContext
from eva.services.safety.crisis_assessor import CrisisRiskAssessor
from eva.services.safety.incident_history import IncidentHistory
from eva.services.safety.safety_plan_generator import SafetyPlanGenerator

logger = get_logger(__name__)


class ConversationOrchestrator:
    """
    Main orchestrator for the EVA response pipeline.

    1. Look up recent high-risk incidents (collaborator)
    2. Assess crisis risk
    3. HIGH/CRITICAL: crisis response plus personalized safety plan
    4. Otherwise: infer preferences and route to a modality

    Usage:
        orchestrator = await ConversationOrchestrator.build()
        response = await orchestrator.process(message, user_id, history)
    """

    CRISIS_EXERCISES: tuple[str, ...] = ("safety_planning", "grounding_techniques")

    def __init__(
        self,
        assessor: Optional[CrisisRiskAssessor] = None,
        preference_engine: Optional[PreferenceInferenceEngine] = None,
        router: Optional[ModalityRouter] = None,
        safety_plans: Optional[SafetyPlanGenerator] = None,
        incident_history: Optional[IncidentHistory] = None,
        dialectics: Optional[DialecticSessionManager] = None,
        settings: Optional[Settings] = None,
        belief_store: Optional[BeliefStore] = None,
    ) -> None:
        """
        Initialize orchestrator with services.

        Args:
            assessor: Crisis risk assessor
            preference_engine: Preference inference engine
            router: Modality router
            safety_plans: Safety plan generator
            incident_history: Recent incident lookup (None counts as no incidents)
            dialectics: Dialectic session manager sharing the same collaborators
            settings: Settings (defaults to get_settings())
            belief_store: Store to close on shutdown, when owned
        """
        self._settings = settings or get_settings()
        self._assessor = assessor or CrisisRiskAssessor()
        self._preferences = preference_engine or PreferenceInferenceEngine(
            statement_window=self._settings.routing.belief_statement_window,
        )
        self._router = router or ModalityRouter()
        self._safety_plans = safety_plans or SafetyPlanGenerator()
        self._incident_history = incident_history
        self._dialectics = dialectics or DialecticSessionManager()
        self._belief_store = belief_store

    @classmethod
    async def build(
        cls,
        settings: Optional[Settings] = None,
        generation: Optional[GenerationService] = None,
        incident_history: Optional[IncidentHistory] = None,
        belief_store: Optional[BeliefStore] = None,
        rng: Optional[random.Random] = None,
    ) -> "ConversationOrchestrator":
        """
        Construct an orchestrator with its collaborators.

        The belief store is wired in only after an awaited readiness
        check succeeds. A store that is not ready is left out entirely
        and every inference runs locally.

        Args:
            settings: Settings (defaults to get_settings())
            generation: Generation service (defaults to the configured provider)
            incident_history: Recent incident lookup
            belief_store: Belief store (defaults to an HTTP client from settings)
            rng: Random source for style adaptation

        Returns:
            Ready orchestrator
        """
        settings = settings or get_settings()
        generation = generation or get_generation_service(settings)
        rng = rng or random.Random(settings.routing.random_seed)

        store = None
        if settings.belief_store.enabled:
            candidate = belief_store or HttpBeliefStore.from_settings(settings.belief_store)
            readiness = await candidate.connect()
            if readiness.ready:
                store = candidate
            elif belief_store is None:
                await candidate.aclose()

        logger.info(
            "Conversation orchestrator built",
            provider=generation.provider_name,
            belief_store_ready=store is not None,
            incident_history=incident_history is not None,
        )

        routing = settings.routing
        return cls(
            preference_engine=PreferenceInferenceEngine(
                belief_store=store,
                statement_window=routing.belief_statement_window,
            ),
            router=ModalityRouter(
                generation=generation,
                prompt_builder=PromptBuilder(
                    history_window=routing.history_window,
                    max_tokens=routing.max_tokens,
                    temperature=routing.temperature,
                ),
                rng=rng,
            ),
            incident_history=incident_history,
            dialectics=DialecticSessionManager(
                generation=generation,
                belief_store=store,
                follow_up_max_tokens=routing.dialectic_max_tokens,
                reflection_max_tokens=routing.reflection_max_tokens,
                temperature=routing.temperature,
            ),
            settings=settings,
            belief_store=store if belief_store is None else None,
        )

    @property
    def preferences(self) -> PreferenceInferenceEngine:
        return self._preferences

    @property
    def dialectics(self) -> DialecticSessionManager:
        return self._dialectics

    async def shutdown(self) -> None:
        """Release collaborators owned by the orchestrator."""
        if isinstance(self._belief_store, HttpBeliefStore):
            await self._belief_store.aclose()

    async def process(
        self,
        user_message: str,
        user_id: Optional[str] = None,
        history: Sequence[Message] = (),
        emotional_state: Optional[EmotionalState] = None,
        correlation_id: Optional[str] = None,
    ) -> TherapeuticResponse:
        """
        Process one user message through the pipeline.

        Args:
            user_message: User's input message
            user_id: User identifier
            history: Conversation history before this message, oldest first
            emotional_state: Caller-supplied emotional state
            correlation_id: Tracing ID bound to every log entry (generated if absent)

        Returns:
            TherapeuticResponse
        """
        with correlation_context(correlation_id or str(uuid4())):
            return await self._process(user_message, user_id, history, emotional_state)

    async def _process(
        self,
        user_message: str,
        user_id: Optional[str],
        history: Sequence[Message],
        emotional_state: Optional[EmotionalState],
    ) -> TherapeuticResponse:
        logger.debug(
            "Processing user message",
            message_length=len(user_message or ""),
            history_messages=len(history),
        )

        # Step 1: Crisis assessment (always first)
        incident_count = await self._recent_incident_count(user_id)
        assessment = self._assessor.assess(user_message, emotional_state, incident_count)

        # Step 2: Safety short-circuit
        if assessment.requires_safety_response:
            return self._crisis_response(assessment, history)

        # Step 3: Preferences
        profile = await self._preferences.infer(history, user_id)

        # Step 4: Routing
        context = RoutingContext(
            crisis_indicators=self._has_crisis_indicators(assessment, history),
            vulnerability_level=emotional_state.intensity if emotional_state else None,
            emotional_state=emotional_state,
        )
        response = await self._router.route(user_message, profile, history, context)
        response.crisis_assessment = assessment
        return response

    def _crisis_response(
        self,
        assessment: CrisisAssessment,
        history: Sequence[Message],
    ) -> TherapeuticResponse:
        crisis = self._safety_plans.crisis_response()
        modality = self._preferences.infer_local(history).primary_modality
        plan = self._safety_plans.personalized_plan(modality)

        if self._settings.safety.audit_log_enabled:
            logger.warning("Crisis response issued", **assessment.to_audit_record())

        return TherapeuticResponse(
            content=crisis.message,
            modality=None,
            suggested_exercises=list(self.CRISIS_EXERCISES),
            conversation_depth="crisis",
            confidence=1.0,
            crisis_assessment=assessment,
            crisis_response=crisis,
            safety_plan=plan,
        )

    def _has_crisis_indicators(
        self,
        assessment: CrisisAssessment,
        history: Sequence[Message],
    ) -> bool:
        if assessment.risk_level >= CrisisRiskLevel.MODERATE:
            return True
        return self._assessor.history_has_crisis_indicators(
            history, self._settings.safety.escalation_history_window
        )

    async def _recent_incident_count(self, user_id: Optional[str]) -> int:
        if self._incident_history is None or not user_id:
            return 0
        try:
            return await self._incident_history.count_recent_high_risk_incidents(
                user_id, self._settings.safety.incident_lookback_hours
            )
        except Exception as e:
            logger.error(
                "Incident history lookup failed, assuming none",
                error_type=type(e).__name__,
            )
            return 0
