"""
Dialectic Session Manager

Runs guided question/answer sessions that surface a person's beliefs
about therapy, vulnerability, change, self-efficacy and meaning.

Flow:
    start()   -> POSED     fixed question for the focus area
    answer()  -> ANSWERED  answer recorded, forwarded to the belief store
    analyze() -> ANALYZED  keyword rules extract beliefs and insights,
                           follow-up and reflection are generated

Belief store and generation failures never interrupt a session; the
store is skipped and fixed follow-up text is used instead.

CLINICAL_REVIEW_REQUIRED: Questions, rules and fallback text should
be validated by mental health professionals.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from eva.config.logging_config import get_logger
from eva.domain.errors import ValidationError
from eva.domain.models.dialectic import (
    DialecticSession,
    DialecticState,
    DialecticTurnResult,
    FocusArea,
)
from eva.infrastructure.belief_store.client import BeliefStore, BeliefStoreUnavailable
from eva.infrastructure.llm.provider import GenerationService, GenerationUnavailable
from eva.services.detection.keyword_matcher import KeywordMatcher
from eva.services.prompt.prompt_builder import GenerationRequest

logger = get_logger(__name__)


@dataclass(frozen=True)
class DialecticPrompt:
    """Question and follow-up question for one focus area."""

    question: str
    follow_up: str


@dataclass(frozen=True)
class BeliefRule:
    """
    One keyword rule for answer analysis.

    Attributes:
        matcher: Keywords that trigger the rule
        belief: Belief tag recorded on a match
        insight: Insight recorded on a match (optional)
        indicators: Modalities the belief points toward
    """

    matcher: KeywordMatcher
    belief: str
    insight: Optional[str] = None
    indicators: tuple[str, ...] = ()


@dataclass(frozen=True)
class BeliefAnalysis:
    """Output of keyword analysis of one answer."""

    beliefs: tuple[str, ...] = ()
    insights: tuple[str, ...] = ()
    therapeutic_indicators: tuple[str, ...] = ()


@dataclass(frozen=True)
class FocusSuggestion:
    """A focus area worth exploring next."""

    focus_area: FocusArea
    title: str
    description: str

    def to_dict(self) -> dict:
        return {
            "focus_area": self.focus_area.value,
            "title": self.title,
            "description": self.description,
        }


# CLINICAL_REVIEW_REQUIRED
PROMPTS: Mapping[FocusArea, DialecticPrompt] = MappingProxyType({
    FocusArea.THERAPEUTIC_APPROACH: DialecticPrompt(
        question=(
            "Let's explore your beliefs about how therapy works. What do you think "
            "creates positive change in therapy - is it gaining insight, learning new "
            "skills, the relationship itself, or something else?"
        ),
        follow_up="That's interesting. Can you tell me more about why that resonates with you?",
    ),
    FocusArea.VULNERABILITY: DialecticPrompt(
        question=(
            "How do you feel about being vulnerable and sharing deep emotions? Is it "
            "something that comes naturally, or does it feel challenging?"
        ),
        follow_up="What has shaped your comfort level with vulnerability?",
    ),
    FocusArea.CHANGE_BELIEFS: DialecticPrompt(
        question=(
            "When you think about personal change, do you see it as something that "
            "happens gradually over time, or through sudden breakthroughs and realizations?"
        ),
        follow_up="Can you think of a time when you experienced change in that way?",
    ),
    FocusArea.SELF_EFFICACY: DialecticPrompt(
        question=(
            "How confident do you feel in your ability to work through mental health "
            "challenges? What gives you strength, and what feels overwhelming?"
        ),
        follow_up="What would help you feel more empowered in your mental health journey?",
    ),
    FocusArea.MEANING_MAKING: DialecticPrompt(
        question=(
            "How do you make sense of difficult experiences? Do you look for lessons, "
            "see them as random, or find meaning in another way?"
        ),
        follow_up="How does that perspective help or hinder your healing?",
    ),
})


# CLINICAL_REVIEW_REQUIRED
BELIEF_RULES: Mapping[FocusArea, tuple[BeliefRule, ...]] = MappingProxyType({
    FocusArea.THERAPEUTIC_APPROACH: (
        BeliefRule(
            KeywordMatcher.of("skills", ["skill", "tool", "technique"]),
            belief="Skills-based learning preference",
            indicators=("cbt",),
        ),
        BeliefRule(
            KeywordMatcher.of("relationship", ["relationship", "understood", "accepted"]),
            belief="Relationship-focused healing",
            indicators=("humanistic",),
        ),
        BeliefRule(
            KeywordMatcher.of("insight", ["insight", "understand", "pattern"]),
            belief="Insight-oriented approach",
            indicators=("psychodynamic",),
        ),
    ),
    FocusArea.VULNERABILITY: (
        BeliefRule(
            KeywordMatcher.of("challenging", ["difficult", "hard", "scary"]),
            belief="Vulnerability is challenging",
            insight="May benefit from gradual trust-building",
        ),
        BeliefRule(
            KeywordMatcher.of("comfortable", ["natural", "easy", "comfortable"]),
            belief="High vulnerability comfort",
            insight="Ready for deeper therapeutic work",
        ),
    ),
    FocusArea.CHANGE_BELIEFS: (
        BeliefRule(
            KeywordMatcher.of("gradual", ["gradual", "slow", "time"]),
            belief="Gradual change believer",
            insight="May prefer consistent, incremental approaches",
        ),
        BeliefRule(
            KeywordMatcher.of("breakthrough", ["sudden", "breakthrough", "realize"]),
            belief="Breakthrough change believer",
            insight="May respond well to insight-oriented work",
        ),
    ),
    FocusArea.SELF_EFFICACY: (
        BeliefRule(
            KeywordMatcher.of("confidence", ["confident", "capable", "strong", "able"]),
            belief="High self-efficacy",
            insight="Strong foundation for self-directed work",
        ),
        BeliefRule(
            KeywordMatcher.of("doubt", ["overwhelmed", "helpless", "weak", "unable"]),
            belief="Low self-efficacy",
            insight="May benefit from strength-building focus",
        ),
    ),
    FocusArea.MEANING_MAKING: (
        BeliefRule(
            KeywordMatcher.of("growth", ["lesson", "growth", "purpose"]),
            belief="Growth-oriented meaning maker",
            indicators=("humanistic", "existential"),
        ),
        BeliefRule(
            KeywordMatcher.of("struggle", ["random", "unfair", "no reason"]),
            belief="Struggles with meaning-making",
            insight="May benefit from meaning-focused interventions",
        ),
    ),
})


FALLBACK_FOLLOW_UP = (
    "Thank you for sharing that. Your perspective gives me valuable insight into what "
    "might work best for you. How do you think this belief influences your approach "
    "to personal growth?"
)
FALLBACK_REFLECTION = (
    "What would it mean for your healing journey if this belief shifted even slightly?"
)


def analyze_answer(answer: str, focus_area: FocusArea) -> BeliefAnalysis:
    """
    Apply the focus area's keyword rules to an answer.

    Rules are independent; every matching rule contributes its belief,
    insight and indicators. Indicators are deduplicated in order.
    """
    beliefs: list[str] = []
    insights: list[str] = []
    indicators: list[str] = []

    for rule in BELIEF_RULES.get(focus_area, ()):
        if not rule.matcher.matches_any(answer):
            continue
        beliefs.append(rule.belief)
        if rule.insight:
            insights.append(rule.insight)
        for indicator in rule.indicators:
            if indicator not in indicators:
                indicators.append(indicator)

    return BeliefAnalysis(
        beliefs=tuple(beliefs),
        insights=tuple(insights),
        therapeutic_indicators=tuple(indicators),
    )


def suggest_focus_areas(current_beliefs: Mapping[str, object]) -> list[FocusSuggestion]:
    """
    Suggest focus areas that have not been explored yet.

    Args:
        current_beliefs: Known beliefs keyed by therapeutic_approach,
            vulnerability_comfort, change_beliefs, self_efficacy,
            meaning_making

    Returns:
        Suggestions in focus-area order
    """
    suggestions: list[FocusSuggestion] = []

    if not current_beliefs.get("therapeutic_approach"):
        suggestions.append(FocusSuggestion(
            FocusArea.THERAPEUTIC_APPROACH,
            "Explore Your Therapeutic Preferences",
            "Discover what therapeutic approaches resonate with your beliefs about "
            "change and healing.",
        ))

    comfort = current_beliefs.get("vulnerability_comfort")
    if not comfort or (isinstance(comfort, (int, float)) and comfort < 5):
        suggestions.append(FocusSuggestion(
            FocusArea.VULNERABILITY,
            "Understanding Your Comfort with Vulnerability",
            "Explore your relationship with emotional openness and what makes sharing "
            "feel safe.",
        ))

    if not current_beliefs.get("change_beliefs"):
        suggestions.append(FocusSuggestion(
            FocusArea.CHANGE_BELIEFS,
            "How Do You View Personal Change?",
            "Examine your beliefs about how people grow and transform.",
        ))

    if not current_beliefs.get("self_efficacy"):
        suggestions.append(FocusSuggestion(
            FocusArea.SELF_EFFICACY,
            "Your Confidence in Mental Health Management",
            "Explore your beliefs about your ability to navigate mental health challenges.",
        ))

    if not current_beliefs.get("meaning_making"):
        suggestions.append(FocusSuggestion(
            FocusArea.MEANING_MAKING,
            "Making Sense of Difficult Experiences",
            "Discover how you create meaning from life's challenges.",
        ))

    return suggestions


class DialecticSessionManager:
    """
    Drives dialectic sessions through POSED, ANSWERED and ANALYZED.

    The manager holds no session state; sessions are passed in and
    mutated in place, so callers own persistence.

    Usage:
        manager = DialecticSessionManager(generation=provider)
        session = await manager.start(user_id, FocusArea.VULNERABILITY)
        result = await manager.respond(session, "It feels hard to open up")
    """

    FOLLOW_UP_INSTRUCTION: str = (
        "You are conducting a dialectic conversation about {focus_area}.\n\n"
        "Based on their response, we identified these beliefs: {beliefs}\n\n"
        "Generate a thoughtful follow-up that:\n"
        "1. Validates their perspective\n"
        "2. Gently explores deeper\n"
        "3. Offers a reflection or insight\n"
        "4. Remains non-judgmental and curious\n\n"
        "Keep the response conversational and under 100 words."
    )
    REFLECTION_INSTRUCTION: str = (
        "Based on the user's beliefs about {focus_area}, create a brief reflection "
        "question they can ponder. Make it thought-provoking but gentle."
    )

    def __init__(
        self,
        generation: Optional[GenerationService] = None,
        belief_store: Optional[BeliefStore] = None,
        follow_up_max_tokens: int = 150,
        reflection_max_tokens: int = 50,
        temperature: float = 0.7,
    ) -> None:
        """
        Initialize manager.

        Args:
            generation: Generation service (None always uses fallback text)
            belief_store: Ready belief store (None keeps sessions local)
            follow_up_max_tokens: Token budget for the follow-up
            reflection_max_tokens: Token budget for the reflection prompt
            temperature: Generation temperature
        """
        self._generation = generation
        self._belief_store = belief_store
        self._follow_up_max_tokens = follow_up_max_tokens
        self._reflection_max_tokens = reflection_max_tokens
        self._temperature = temperature

    async def start(
        self,
        user_id: str,
        focus_area: FocusArea | str,
    ) -> DialecticSession:
        """
        Pose the question for a focus area.

        Unknown focus areas fall back to the therapeutic approach.
        """
        area = FocusArea.coerce(focus_area)
        prompt = PROMPTS[area]

        session = DialecticSession(
            user_id=user_id,
            focus_area=area,
            question=prompt.question,
            follow_up_question=prompt.follow_up,
        )
        session.external_id = await self._create_external(user_id, prompt.question)

        logger.info(
            "Dialectic started",
            session_id=str(session.id),
            focus_area=area.value,
            external=session.external_id is not None,
        )
        return session

    def reopen(self, session: DialecticSession, focus_area: FocusArea | str) -> DialecticSession:
        """Pose a new question on an existing session."""
        area = FocusArea.coerce(focus_area)
        prompt = PROMPTS[area]
        session.repose(area, prompt.question, prompt.follow_up)

        logger.info("Dialectic reopened", session_id=str(session.id), focus_area=area.value)
        return session

    async def answer(self, session: DialecticSession, text: str) -> DialecticSession:
        """
        Record a free-text answer.

        Raises:
            ValidationError: If the answer is empty
        """
        session.record_answer(text)

        if self._belief_store is not None:
            await self._forward_answer(session, text)

        logger.debug(
            "Dialectic answered",
            session_id=str(session.id),
            text_length=len(text),
        )
        return session

    async def analyze(self, session: DialecticSession) -> DialecticTurnResult:
        """
        Extract beliefs from the recorded answer and generate a follow-up.

        Raises:
            ValidationError: If the session has not been answered
        """
        if session.state != DialecticState.ANSWERED:
            raise ValidationError(
                f"Cannot analyze a session in state {session.state.value}", "state"
            )

        analysis = analyze_answer(session.answer or "", session.focus_area)
        follow_up, reflection = await self._follow_up(session, analysis)

        session.record_analysis(
            beliefs=list(analysis.beliefs),
            insights=list(analysis.insights),
            indicators={indicator: True for indicator in analysis.therapeutic_indicators},
            follow_up=follow_up,
            reflection_prompt=reflection,
        )

        logger.info(
            "Dialectic analyzed",
            session_id=str(session.id),
            focus_area=session.focus_area.value,
            belief_count=len(analysis.beliefs),
        )

        return DialecticTurnResult(
            follow_up=follow_up,
            reflection=reflection,
            beliefs=analysis.beliefs,
            insights=analysis.insights,
            therapeutic_indicators=analysis.therapeutic_indicators,
        )

    async def respond(self, session: DialecticSession, text: str) -> DialecticTurnResult:
        """Record an answer and analyze it in one step."""
        await self.answer(session, text)
        return await self.analyze(session)

    async def _create_external(self, user_id: str, question: str) -> Optional[str]:
        if self._belief_store is None:
            return None
        try:
            return await self._belief_store.create_dialectic(user_id, question)
        except BeliefStoreUnavailable as e:
            logger.warning("Dialectic not created in belief store", error=str(e))
            return None

    async def _forward_answer(self, session: DialecticSession, text: str) -> None:
        try:
            if session.external_id:
                await self._belief_store.update_dialectic(
                    session.user_id, session.external_id, text
                )
            else:
                session.external_id = await self._belief_store.create_dialectic(
                    session.user_id, session.question, text
                )
        except BeliefStoreUnavailable as e:
            logger.warning("Dialectic answer not forwarded", error=str(e))

    async def _follow_up(
        self,
        session: DialecticSession,
        analysis: BeliefAnalysis,
    ) -> tuple[str, str]:
        if self._generation is None:
            return FALLBACK_FOLLOW_UP, FALLBACK_REFLECTION

        area = session.focus_area.value.replace("_", " ")
        beliefs = ", ".join(analysis.beliefs) or "none identified yet"

        try:
            follow_up = await self._generation.generate(GenerationRequest(
                system_instructions=self.FOLLOW_UP_INSTRUCTION.format(
                    focus_area=area, beliefs=beliefs
                ),
                user_message=session.answer or "",
                max_tokens=self._follow_up_max_tokens,
                temperature=self._temperature,
            ))
            reflection = await self._generation.generate(GenerationRequest(
                system_instructions=self.REFLECTION_INSTRUCTION.format(focus_area=area),
                user_message=f"Beliefs identified: {beliefs}",
                max_tokens=self._reflection_max_tokens,
                temperature=self._temperature,
            ))
        except GenerationUnavailable as e:
            logger.warning(
                "Dialectic follow-up generation failed, using fallback",
                provider=e.provider,
                error_type=type(e).__name__,
            )
            return FALLBACK_FOLLOW_UP, FALLBACK_REFLECTION
        except TimeoutError:
            logger.warning("Dialectic follow-up generation timed out, using fallback")
            return FALLBACK_FOLLOW_UP, FALLBACK_REFLECTION

        follow_up_text = (follow_up.content or "").strip()
        reflection_text = (reflection.content or "").strip()
        if not follow_up_text or not reflection_text:
            return FALLBACK_FOLLOW_UP, FALLBACK_REFLECTION

        return follow_up_text, reflection_text
