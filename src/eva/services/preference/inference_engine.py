"""
Preference Inference Engine

Derives a Therapeutic Preference Profile from conversation history.

ARCHITECTURE: The external belief store, when one is wired in, is
asked first and is authoritative. Any belief store failure falls
through silently to deterministic local keyword scoring.

Local inference is rule-based keyword counting over user-authored
messages only. There is no randomness and no learned weighting.

CLINICAL_REVIEW_REQUIRED: Keyword lists are heuristics, not a
clinical instrument.
"""

import math
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from eva.config.logging_config import get_logger
from eva.domain.enums.therapeutic_modality import ChangeBelief, TherapeuticModality
from eva.domain.models.message import Message, user_messages
from eva.domain.models.preference_profile import ProfileSource, TherapeuticPreferenceProfile
from eva.infrastructure.belief_store.client import BeliefStore, BeliefStoreUnavailable
from eva.services.detection.keyword_matcher import KeywordMatcher
from eva.services.modality.modality_config import communication_style
from eva.services.preference.readiness import PreferenceEvolution, compare_profiles

logger = get_logger(__name__)


# CLINICAL_REVIEW_REQUIRED
MODALITY_KEYWORDS: Mapping[TherapeuticModality, KeywordMatcher] = MappingProxyType({
    TherapeuticModality.CBT: KeywordMatcher.of("cbt", [
        "thought", "thinking", "belief", "evidence", "rational", "logical",
        "behavior", "pattern", "homework", "practice", "skill", "technique",
        "goal", "objective", "measure", "track", "progress", "solution",
        "practical",
    ]),
    TherapeuticModality.HUMANISTIC: KeywordMatcher.of("humanistic", [
        "feel", "feeling", "emotion", "growth", "potential", "authentic",
        "self", "acceptance", "understanding", "compassion", "whole",
        "experience", "meaning", "value", "choice", "freedom",
    ]),
    TherapeuticModality.MINDFULNESS: KeywordMatcher.of("mindfulness", [
        "present", "moment", "aware", "awareness", "notice", "observe",
        "accept", "acceptance", "breath", "body", "sensation", "mindful",
        "meditation", "peace", "calm", "let go", "non-judgment",
    ]),
    TherapeuticModality.PSYCHODYNAMIC: KeywordMatcher.of("psychodynamic", [
        "past", "childhood", "parent", "relationship", "pattern", "unconscious",
        "dream", "defense", "resistance", "transference", "insight",
        "understand", "explore", "deeper", "underlying", "root",
    ]),
    TherapeuticModality.EXISTENTIAL: KeywordMatcher.of("existential", [
        "meaning", "purpose", "death", "freedom", "isolation", "authentic",
        "responsibility", "choice", "existence", "being", "nothingness",
        "anxiety", "dread", "courage", "create", "transcend",
    ]),
    TherapeuticModality.SOMATIC: KeywordMatcher.of("somatic", [
        "body", "sensation", "physical", "tense", "relax", "breath",
        "stomach", "chest", "shoulders", "jaw", "embodied", "grounding",
        "nervous system", "safety", "movement", "posture",
    ]),
    TherapeuticModality.SOLUTION_FOCUSED: KeywordMatcher.of("solution_focused", [
        "solution", "future", "what works", "strengths", "resources",
        "scale", "better", "miracle", "exception", "success",
        "achieve", "improve", "positive", "different", "change",
    ]),
    TherapeuticModality.DIALECTICAL_BEHAVIORAL: KeywordMatcher.of("dialectical_behavioral", [
        "balance", "accept", "change", "both", "middle path", "skills",
        "distress", "tolerance", "regulate", "effective", "wise mind",
        "mindful", "interpersonal", "radical acceptance", "opposite action",
    ]),
    TherapeuticModality.NARRATIVE: KeywordMatcher.of("narrative", [
        "story", "narrative", "reauthor", "externalize", "problem",
        "identity", "preferred", "unique outcome", "dominant story",
        "alternative", "meaning", "context", "influence", "agency",
    ]),
    TherapeuticModality.ACCEPTANCE_COMMITMENT: KeywordMatcher.of("acceptance_commitment", [
        "values", "accept", "committed action", "flexibility", "workable",
        "defusion", "present", "willing", "choice", "vitality",
        "meaningful", "stuck", "struggle", "contact", "purpose",
    ]),
})

VULNERABILITY_INDICATORS = KeywordMatcher.of("vulnerability", [
    "feel", "scared", "vulnerable", "honest", "truth", "shame", "guilt",
])
GRADUAL_INDICATORS = KeywordMatcher.of("gradual", [
    "slowly", "gradually", "time", "process", "journey",
])
BREAKTHROUGH_INDICATORS = KeywordMatcher.of("breakthrough", [
    "breakthrough", "sudden", "realize", "epiphany", "transform",
])


class PreferenceInferenceEngine:
    """
    Infers therapeutic preferences from conversation history.

    Local scoring rules:
    1. Each keyword found in a user message adds one to its modality
    2. Primary modality is the unique maximum; ties and all-zero
       counts resolve to humanistic
    3. Confidence is 0.8 when the maximum exceeds 5, else 0.6
    4. Vulnerability comfort starts at 5.0 and gains 0.5 per user
       message containing any indicator, clamped to 10, rounded half-up
    5. Change beliefs are breakthrough only on strictly more
       breakthrough hits than gradual hits

    Usage:
        engine = PreferenceInferenceEngine(belief_store=store)
        profile = await engine.infer(history, user_id)
    """

    BASE_VULNERABILITY: float = 5.0
    VULNERABILITY_STEP: float = 0.5
    MAX_VULNERABILITY: float = 10.0

    HIGH_CONFIDENCE: float = 0.8
    LOW_CONFIDENCE: float = 0.6
    CONFIDENCE_THRESHOLD: int = 5

    def __init__(
        self,
        belief_store: Optional[BeliefStore] = None,
        statement_window: int = 5,
    ) -> None:
        """
        Initialize engine.

        Args:
            belief_store: Ready belief store, or None for local-only inference
            statement_window: User messages submitted to the store per inference
        """
        self._belief_store = belief_store
        self._statement_window = statement_window

    @property
    def has_belief_store(self) -> bool:
        return self._belief_store is not None

    async def infer(
        self,
        history: Sequence[Message],
        user_id: Optional[str],
    ) -> TherapeuticPreferenceProfile:
        """
        Infer preferences, preferring the external belief store.

        Args:
            history: Conversation history, oldest first
            user_id: User identifier (external lookup needs one)

        Returns:
            TherapeuticPreferenceProfile (never raises for store failures)
        """
        if self._belief_store is not None and user_id:
            profile = await self._infer_external(history, user_id)
            if profile is not None:
                return profile

        return self.infer_local(history)

    def infer_local(self, history: Sequence[Message]) -> TherapeuticPreferenceProfile:
        """
        Deterministic keyword-based inference.

        Args:
            history: Conversation history, oldest first

        Returns:
            TherapeuticPreferenceProfile tagged local
        """
        texts = [m.content for m in user_messages(history)]

        scores = self.score_modalities(texts)
        primary = self._primary(scores)
        secondary = self._secondary(scores, primary)
        top = max(scores.values(), default=0)

        profile = TherapeuticPreferenceProfile(
            primary_modality=primary,
            secondary_modality=secondary,
            vulnerability_comfort=self._vulnerability_comfort(texts),
            change_beliefs=self._change_beliefs(texts),
            communication_style=communication_style(primary),
            confidence=(
                self.HIGH_CONFIDENCE if top > self.CONFIDENCE_THRESHOLD
                else self.LOW_CONFIDENCE
            ),
            source=ProfileSource.LOCAL,
            modality_scores={m.value: s for m, s in scores.items()},
        )

        logger.debug(
            "Local preferences inferred",
            primary_modality=primary.value,
            max_score=top,
            user_messages=len(texts),
        )

        return profile

    async def track_evolution(
        self,
        user_id: Optional[str],
        previous: TherapeuticPreferenceProfile,
        current: TherapeuticPreferenceProfile,
    ) -> PreferenceEvolution:
        """
        Compare two profiles and record the change when a store is wired in.

        Recording failures are logged and ignored.
        """
        evolution = compare_profiles(previous, current)

        if self._belief_store is not None and user_id:
            try:
                await self._belief_store.record_outcome(user_id, {
                    "type": "preference_evolution",
                    "previous": previous.to_dict(),
                    "current": current.to_dict(),
                    **evolution.to_dict(),
                })
            except BeliefStoreUnavailable as e:
                logger.warning("Preference evolution not recorded", error=str(e))

        return evolution

    @staticmethod
    def score_modalities(texts: Sequence[str]) -> dict[TherapeuticModality, int]:
        """Keyword hit count per modality, in canonical modality order."""
        scores = {modality: 0 for modality in TherapeuticModality}
        for text in texts:
            for modality, matcher in MODALITY_KEYWORDS.items():
                scores[modality] += matcher.count(text)
        return scores

    async def _infer_external(
        self,
        history: Sequence[Message],
        user_id: str,
    ) -> Optional[TherapeuticPreferenceProfile]:
        store = self._belief_store
        statements = user_messages(history)[-self._statement_window:]

        try:
            await store.ensure_self_model(user_id)
            for message in statements:
                await store.submit_statement(user_id, message.content)
            profile = await store.get_aggregated_preferences(user_id)
        except BeliefStoreUnavailable as e:
            logger.warning("Belief store failed, using local inference", error=str(e))
            return None
        except Exception as e:
            logger.error(
                "Unexpected belief store error, using local inference",
                error_type=type(e).__name__,
            )
            return None

        if profile is None:
            logger.debug("Belief store returned no preferences")
            return None

        logger.debug(
            "External preferences retrieved",
            primary_modality=profile.primary_modality.value,
            statements=len(statements),
        )
        return profile

    @staticmethod
    def _primary(scores: Mapping[TherapeuticModality, int]) -> TherapeuticModality:
        top = max(scores.values(), default=0)
        if top == 0:
            return TherapeuticModality.default()

        leaders = [m for m, s in scores.items() if s == top]
        if len(leaders) > 1:
            return TherapeuticModality.default()
        return leaders[0]

    @staticmethod
    def _secondary(
        scores: Mapping[TherapeuticModality, int],
        primary: TherapeuticModality,
    ) -> TherapeuticModality:
        fallback = (
            TherapeuticModality.MINDFULNESS
            if primary == TherapeuticModality.HUMANISTIC
            else TherapeuticModality.HUMANISTIC
        )
        best, best_score = fallback, 0
        for modality, score in scores.items():
            if modality != primary and score > best_score:
                best, best_score = modality, score
        return best

    def _vulnerability_comfort(self, texts: Sequence[str]) -> int:
        score = self.BASE_VULNERABILITY
        for text in texts:
            if VULNERABILITY_INDICATORS.matches_any(text):
                score = min(score + self.VULNERABILITY_STEP, self.MAX_VULNERABILITY)
        return int(math.floor(score + 0.5))

    @staticmethod
    def _change_beliefs(texts: Sequence[str]) -> ChangeBelief:
        gradual = sum(GRADUAL_INDICATORS.count(t) for t in texts)
        breakthrough = sum(BREAKTHROUGH_INDICATORS.count(t) for t in texts)
        if breakthrough > gradual:
            return ChangeBelief.BREAKTHROUGH
        return ChangeBelief.GRADUAL
