"""
Unit Tests for Crisis Risk Assessor

Tests keyword scoring, emotional-state contributions, history
promotion, thresholds and fail-safe behavior.
"""

import pytest

from eva.domain.models.message import EmotionalState, Message
from eva.domain.models.risk_models import CrisisRiskLevel
from eva.services.safety.crisis_assessor import CrisisRiskAssessor


@pytest.fixture
def assessor() -> CrisisRiskAssessor:
    return CrisisRiskAssessor()


class TestKeywordScoring:
    """Tests for keyword list contributions."""

    def test_neutral_message_is_low(self, assessor: CrisisRiskAssessor) -> None:
        result = assessor.assess("I had a long day at work")

        assert result.risk_score == 0
        assert result.risk_level == CrisisRiskLevel.LOW
        assert not result.has_indicators

    @pytest.mark.parametrize("keyword", [
        "suicide", "kill myself", "end my life", "not worth living",
        "better off dead", "want to die", "no reason to live",
    ])
    def test_high_risk_keyword_never_low(
        self, assessor: CrisisRiskAssessor, keyword: str
    ) -> None:
        """Any high-risk keyword lifts the level above low."""
        result = assessor.assess(f"Sometimes I think {keyword}")

        assert result.risk_level != CrisisRiskLevel.LOW
        assert result.risk_level >= CrisisRiskLevel.HIGH
        assert f"high_risk_keyword:{keyword}" in result.risk_factors

    def test_moderate_keyword_scores_five(self, assessor: CrisisRiskAssessor) -> None:
        result = assessor.assess("Everything feels hopeless")

        assert result.risk_score == 5
        assert result.risk_level == CrisisRiskLevel.MODERATE
        assert "moderate_risk_keyword:hopeless" in result.risk_factors

    def test_self_harm_keyword_scores_seven(self, assessor: CrisisRiskAssessor) -> None:
        result = assessor.assess("I keep wanting to hurt myself")

        assert result.risk_score == 7
        assert result.risk_level == CrisisRiskLevel.MODERATE
        assert "self_harm_keyword:hurt myself" in result.risk_factors

    def test_repeated_keyword_counts_once(self, assessor: CrisisRiskAssessor) -> None:
        result = assessor.assess("empty, empty, so empty")

        assert result.risk_score == 5

    def test_distinct_keywords_are_additive(self, assessor: CrisisRiskAssessor) -> None:
        result = assessor.assess("I feel hopeless and worthless and I want to hurt myself")

        assert result.risk_score == 5 + 5 + 7
        assert result.risk_level == CrisisRiskLevel.CRITICAL

    def test_matching_is_case_insensitive(self, assessor: CrisisRiskAssessor) -> None:
        result = assessor.assess("I WANT TO DIE")

        assert result.risk_score == 10
        assert result.risk_level == CrisisRiskLevel.HIGH

    def test_curly_apostrophe_matches(self, assessor: CrisisRiskAssessor) -> None:
        result = assessor.assess("I can’t go on like this")

        assert "moderate_risk_keyword:can't go on" in result.risk_factors


class TestEmotionalState:
    """Tests for emotional state contributions."""

    def test_end_my_life_with_despair_is_critical(self, assessor: CrisisRiskAssessor) -> None:
        """Keyword, intensity and emotion all contribute."""
        result = assessor.assess(
            "I want to end my life",
            EmotionalState(primary_emotion="despair", intensity=9),
        )

        assert result.risk_score == 20
        assert result.risk_level == CrisisRiskLevel.CRITICAL
        assert {
            "high_risk_keyword:end my life",
            "extreme_emotional_intensity",
            "high_risk_emotion:despair",
        } <= result.risk_factors

    def test_intensity_below_nine_adds_nothing(self, assessor: CrisisRiskAssessor) -> None:
        result = assessor.assess("rough week", EmotionalState("sad", 8))

        assert result.risk_score == 0

    def test_missing_state_is_neutral(self, assessor: CrisisRiskAssessor) -> None:
        assert assessor.assess("rough week", None).risk_score == 0

    def test_hopelessness_emotion_alone_is_moderate(self, assessor: CrisisRiskAssessor) -> None:
        result = assessor.assess("rough week", EmotionalState("Hopelessness", 5))

        assert result.risk_score == 5
        assert "high_risk_emotion:hopelessness" in result.risk_factors


class TestRecentHistory:
    """Tests for recent high-risk incident contributions."""

    def test_history_promotes_moderate_to_high(self, assessor: CrisisRiskAssessor) -> None:
        result = assessor.assess("I feel numb", recent_incident_count=2)

        assert result.risk_score == 10
        assert result.risk_level == CrisisRiskLevel.HIGH
        assert "recent_crisis_history" in result.risk_factors

    def test_history_adds_score_without_promoting_low(
        self, assessor: CrisisRiskAssessor
    ) -> None:
        result = assessor.assess("ok today", recent_incident_count=1)

        assert result.risk_score == 5
        assert result.risk_level == CrisisRiskLevel.LOW

    def test_zero_incidents_add_nothing(self, assessor: CrisisRiskAssessor) -> None:
        result = assessor.assess("I feel numb", recent_incident_count=0)

        assert result.risk_score == 5
        assert "recent_crisis_history" not in result.risk_factors


class TestProperties:
    """Monotonicity and determinism."""

    def test_score_never_decreases_as_contributions_grow(
        self, assessor: CrisisRiskAssessor
    ) -> None:
        messages = [
            "fine",
            "hopeless",
            "hopeless and worthless",
            "hopeless and worthless, I want to die",
            "hopeless and worthless, I want to die, I hurt myself",
        ]
        scores = [assessor.assess(m).risk_score for m in messages]
        levels = [assessor.assess(m).risk_level for m in messages]

        assert scores == sorted(scores)
        assert levels == sorted(levels)

    def test_keyword_order_does_not_matter(self, assessor: CrisisRiskAssessor) -> None:
        first = assessor.assess("worthless and I want to die")
        second = assessor.assess("I want to die and worthless")

        assert first.risk_score == second.risk_score
        assert first.risk_factors == second.risk_factors

    @pytest.mark.parametrize("score,level", [
        (0, CrisisRiskLevel.LOW),
        (4, CrisisRiskLevel.LOW),
        (5, CrisisRiskLevel.MODERATE),
        (9, CrisisRiskLevel.MODERATE),
        (10, CrisisRiskLevel.HIGH),
        (14, CrisisRiskLevel.HIGH),
        (15, CrisisRiskLevel.CRITICAL),
    ])
    def test_thresholds(self, score: int, level: CrisisRiskLevel) -> None:
        assert CrisisRiskLevel.from_score(score) == level


class TestFailSafe:
    """Internal errors must fail toward the safety path."""

    def test_scoring_error_returns_critical(
        self, assessor: CrisisRiskAssessor, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(assessor, "_score", broken)

        result = assessor.assess("anything")

        assert result.risk_level == CrisisRiskLevel.CRITICAL
        assert result.requires_safety_response
        assert "assessment_error" in result.risk_factors

    def test_none_message_is_low(self, assessor: CrisisRiskAssessor) -> None:
        assert assessor.assess(None).risk_level == CrisisRiskLevel.LOW


class TestPreFilter:
    """Coarse keyword pre-filter shares the scoring tables."""

    def test_high_risk_and_self_harm_trip_prefilter(self, assessor: CrisisRiskAssessor) -> None:
        assert assessor.has_crisis_indicators("I might kill myself")
        assert assessor.has_crisis_indicators("thinking about cutting again")

    def test_moderate_keywords_do_not_trip_prefilter(self, assessor: CrisisRiskAssessor) -> None:
        assert not assessor.has_crisis_indicators("I feel hopeless")

    def test_history_window_only_checks_recent_user_messages(
        self, assessor: CrisisRiskAssessor
    ) -> None:
        history = [Message.user("I want to die")] + [
            Message.user(f"message {i}") for i in range(5)
        ]

        assert not assessor.history_has_crisis_indicators(history, window=5)
        assert assessor.history_has_crisis_indicators(history, window=6)

    def test_assistant_messages_are_ignored(self, assessor: CrisisRiskAssessor) -> None:
        history = [Message.assistant("If you want to die, call 988")]

        assert not assessor.history_has_crisis_indicators(history)
