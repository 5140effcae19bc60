"""
Safety Plan Generator

Crisis messaging and personalized coping plans.

SAFETY-CRITICAL: When crisis assessment is HIGH or CRITICAL this
generator is the sole source of the response. It must never fail.

LEGAL_REVIEW_REQUIRED: Resource contact details and crisis wording
must be verified before production use.
"""

from eva.config.logging_config import get_logger
from eva.domain.enums.therapeutic_modality import TherapeuticModality
from eva.domain.models.safety_plan import CrisisResponse, SafetyPlan, SupportResource

logger = get_logger(__name__)


# Canonical support resources, always presented in this order
CRISIS_RESOURCES: tuple[SupportResource, ...] = (
    SupportResource(
        name="Crisis Text Line",
        contact="Text HOME to 741741",
        description="24/7 crisis support via text",
        resource_type="text",
    ),
    SupportResource(
        name="National Suicide Prevention Lifeline",
        contact="988",
        description="24/7 phone support for crisis situations",
        resource_type="phone",
    ),
    SupportResource(
        name="Emergency Services",
        contact="911",
        description="For immediate danger or medical emergency",
        resource_type="emergency",
    ),
)


class SafetyPlanGenerator:
    """
    Templated crisis response and modality-aware safety plans.

    Coping strategies are tailored for four modalities; every other
    modality receives the humanistic strategies. Immediate steps and
    support resources never vary.

    Usage:
        generator = SafetyPlanGenerator()
        response = generator.crisis_response()
        plan = generator.personalized_plan(TherapeuticModality.MINDFULNESS)
    """

    CRISIS_MESSAGE: str = (
        "I'm very concerned about what you're sharing. Your safety is the most "
        "important thing right now.\n\n"
        "I want you to know that you don't have to go through this alone. "
        "There are people who want to help:\n\n"
        "• Crisis Text Line: Text HOME to 741741 for immediate support\n"
        "• National Suicide Prevention Lifeline: Call or text 988\n"
        "• If you're in immediate danger, please call 911\n\n"
        "Would you be willing to reach out to one of these resources right now? "
        "I'll stay here with you.\n\n"
        "Is there someone you trust - a friend, family member, or therapist - "
        "who you could contact today?"
    )

    IMMEDIATE_STEPS: tuple[str, ...] = (
        "Ensure your immediate safety",
        "Remove any means of self-harm from your environment",
        "Contact a crisis resource or trusted person",
    )

    # CLINICAL_REVIEW_REQUIRED
    COPING_STRATEGIES: dict[TherapeuticModality, tuple[str, ...]] = {
        TherapeuticModality.CBT: (
            "Challenge the thoughts: Write down evidence for and against your negative thoughts",
            "Behavioral activation: Do one small positive activity right now",
            "Problem-solving: Break down the overwhelming situation into smaller parts",
        ),
        TherapeuticModality.HUMANISTIC: (
            "Self-compassion: Treat yourself with the same kindness you'd show a friend",
            "Connect with your values: Remember what matters most to you",
            "Reach out: Share your feelings with someone who accepts you",
        ),
        TherapeuticModality.MINDFULNESS: (
            "Grounding: Notice 5 things you can see, 4 you can hear, 3 you can touch",
            "Breathing: Take 3 deep breaths, focusing only on the breath",
            "Observe without judgment: Notice your thoughts and feelings without fighting them",
        ),
        TherapeuticModality.PSYCHODYNAMIC: (
            "Express emotions: Write or draw what you're feeling without censoring",
            "Identify patterns: Notice if this feeling connects to past experiences",
            "Seek understanding: Explore what this crisis might be telling you",
        ),
    }

    REMINDER: str = "This intense feeling will pass. You have survived difficult times before."

    def crisis_response(self) -> CrisisResponse:
        """
        Build the fixed crisis response.

        Returns:
            CrisisResponse with the three canonical resources
        """
        return CrisisResponse(
            message=self.CRISIS_MESSAGE,
            resources=CRISIS_RESOURCES,
            follow_up_required=True,
        )

    def personalized_plan(self, modality: TherapeuticModality | str | None) -> SafetyPlan:
        """
        Build a safety plan for a modality.

        Args:
            modality: Preferred modality (enum, name or None)

        Returns:
            SafetyPlan; the humanistic plan on any lookup failure
        """
        try:
            resolved = TherapeuticModality.coerce(modality)
            strategies = self.COPING_STRATEGIES.get(resolved)
            if strategies is None:
                resolved = TherapeuticModality.HUMANISTIC
                strategies = self.COPING_STRATEGIES[resolved]
            return self._plan(resolved, strategies)
        except Exception as e:
            logger.error(
                "Safety plan lookup failed, using default plan",
                error_type=type(e).__name__,
            )
            return self.default_plan()

    def default_plan(self) -> SafetyPlan:
        """Humanistic plan used whenever personalization is not possible."""
        return self._plan(
            TherapeuticModality.HUMANISTIC,
            self.COPING_STRATEGIES[TherapeuticModality.HUMANISTIC],
        )

    def format_resources(self) -> str:
        """Format the support resources for display."""
        return "\n".join(resource.format_for_user() for resource in CRISIS_RESOURCES)

    def _plan(
        self,
        modality: TherapeuticModality,
        strategies: tuple[str, ...],
    ) -> SafetyPlan:
        return SafetyPlan(
            immediate_steps=self.IMMEDIATE_STEPS,
            coping_strategies=tuple(strategies),
            support_resources=CRISIS_RESOURCES,
            reminder=self.REMINDER,
            modality=modality.value,
        )
