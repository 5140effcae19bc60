"""
Crisis Risk Assessor

Scores a single message for suicide and self-harm risk.
Runs before any other processing of the message.

SAFETY-CRITICAL: This assessor gates modality routing. A HIGH or
CRITICAL result means the safety plan generator is the only response
source for the message.

ARCHITECTURE: The assessor is a pure function of its inputs. The
recent incident count is looked up by the caller (persistence is a
collaborator concern) and passed in.

LEGAL_REVIEW_REQUIRED: Keyword lists, weights and thresholds have
clinical and legal implications.
"""

from typing import Iterable, Optional

from eva.config.logging_config import get_logger
from eva.domain.models.message import EmotionalState, Message
from eva.domain.models.risk_models import CrisisAssessment, CrisisRiskLevel
from eva.services.detection.keyword_matcher import KeywordMatcher

logger = get_logger(__name__)


class CrisisRiskAssessor:
    """
    Additive keyword and state scoring.

    Scoring:
    1. One scan per keyword list; each distinct matching keyword
       contributes its list weight once
    2. Emotional intensity >= 9 adds 5
    3. Primary emotion hopelessness/despair adds 5
    4. Any recent high/critical incident adds 5 and promotes
       MODERATE to HIGH

    Thresholds: >=15 critical, >=10 high, >=5 moderate, else low.

    SAFETY: `assess` never raises. An internal failure produces a
    CRITICAL assessment so the message takes the safety path.

    Usage:
        assessor = CrisisRiskAssessor()
        assessment = assessor.assess("...", EmotionalState("despair", 9))
    """

    # CLINICAL_VALIDATION_REQUIRED
    HIGH_RISK = KeywordMatcher.of("high_risk_keyword", [
        "suicide", "kill myself", "end my life", "not worth living",
        "better off dead", "want to die", "no reason to live",
    ])
    MODERATE_RISK = KeywordMatcher.of("moderate_risk_keyword", [
        "hopeless", "worthless", "cant go on", "can't go on", "give up",
        "no point", "empty", "numb", "cant take it", "can't take it",
    ])
    SELF_HARM = KeywordMatcher.of("self_harm_keyword", [
        "hurt myself", "cutting", "self harm", "self-harm", "punish myself",
    ])

    KEYWORD_WEIGHTS: tuple[tuple[KeywordMatcher, int], ...] = (
        (HIGH_RISK, 10),
        (MODERATE_RISK, 5),
        (SELF_HARM, 7),
    )

    HIGH_RISK_EMOTIONS: frozenset[str] = frozenset({"hopelessness", "despair"})

    EXTREME_INTENSITY: int = 9
    STATE_WEIGHT: int = 5
    HISTORY_WEIGHT: int = 5

    # Assessment returned when scoring itself fails
    FAIL_SAFE_SCORE: int = 15

    def assess(
        self,
        message: str,
        emotional_state: Optional[EmotionalState] = None,
        recent_incident_count: int = 0,
    ) -> CrisisAssessment:
        """
        Score one message.

        Args:
            message: Raw user message
            emotional_state: Optional caller-supplied emotional state
            recent_incident_count: High/critical incidents in the lookback window

        Returns:
            CrisisAssessment (never raises)
        """
        try:
            assessment = self._score(message, emotional_state, recent_incident_count)
        except Exception as e:
            logger.error(
                "Crisis scoring failed, failing safe",
                error_type=type(e).__name__,
                error=str(e),
            )
            return CrisisAssessment(
                risk_score=self.FAIL_SAFE_SCORE,
                risk_level=CrisisRiskLevel.CRITICAL,
                risk_factors=frozenset({"assessment_error"}),
            )

        if assessment.risk_level >= CrisisRiskLevel.MODERATE:
            logger.warning(
                "Crisis risk detected",
                risk_level=assessment.risk_level.label,
                risk_score=assessment.risk_score,
                factor_count=len(assessment.risk_factors),
            )
        else:
            logger.debug("Crisis assessment completed", risk_score=assessment.risk_score)

        return assessment

    def has_crisis_indicators(self, text: str) -> bool:
        """
        Coarse pre-filter: any high-risk or self-harm keyword present.

        No scoring and no thresholds. Uses the same keyword tables
        as `assess`, so it can never disagree with it about what a
        crisis keyword is.
        """
        return self.HIGH_RISK.matches_any(text) or self.SELF_HARM.matches_any(text)

    def history_has_crisis_indicators(
        self,
        history: Iterable[Message],
        window: int = 5,
    ) -> bool:
        """Whether any of the last `window` user messages trips the pre-filter."""
        if window <= 0:
            return False
        recent_user = [m for m in history if m.is_user][-window:]
        return any(self.has_crisis_indicators(m.content) for m in recent_user)

    def _score(
        self,
        message: str,
        emotional_state: Optional[EmotionalState],
        recent_incident_count: int,
    ) -> CrisisAssessment:
        score = 0
        factors: set[str] = set()

        # Step 1: Keyword lists
        for matcher, weight in self.KEYWORD_WEIGHTS:
            for keyword in matcher.find(message or ""):
                score += weight
                factors.add(f"{matcher.name}:{keyword}")

        # Step 2: Emotional state
        if emotional_state is not None:
            if emotional_state.intensity >= self.EXTREME_INTENSITY:
                score += self.STATE_WEIGHT
                factors.add("extreme_emotional_intensity")

            if emotional_state.primary_emotion in self.HIGH_RISK_EMOTIONS:
                score += self.STATE_WEIGHT
                factors.add(f"high_risk_emotion:{emotional_state.primary_emotion}")

        # Step 3: Classify before history, as history only promotes MODERATE
        level = CrisisRiskLevel.from_score(score)

        # Step 4: Recent crisis history
        if recent_incident_count and recent_incident_count > 0:
            score += self.HISTORY_WEIGHT
            factors.add("recent_crisis_history")
            if level == CrisisRiskLevel.MODERATE:
                level = CrisisRiskLevel.HIGH

        return CrisisAssessment(
            risk_score=score,
            risk_level=level,
            risk_factors=frozenset(factors),
        )
