"""
Unit Tests for Domain Models

Validation rules and derived properties of the core value types.
"""

import pytest

from eva.domain.enums.therapeutic_modality import ChangeBelief, TherapeuticModality
from eva.domain.errors import ValidationError
from eva.domain.models.message import EmotionalState, Message, MessageRole, recent, user_messages
from eva.domain.models.preference_profile import (
    CommunicationStyle,
    TherapeuticPreferenceProfile,
)
from eva.domain.models.risk_models import CrisisAssessment, CrisisRiskLevel
from eva.domain.models.therapeutic_response import TherapeuticResponse


def _profile(comfort: int) -> TherapeuticPreferenceProfile:
    return TherapeuticPreferenceProfile(
        primary_modality=TherapeuticModality.HUMANISTIC,
        secondary_modality=TherapeuticModality.MINDFULNESS,
        vulnerability_comfort=comfort,
        change_beliefs=ChangeBelief.GRADUAL,
        communication_style=CommunicationStyle(4, 9, 3, 5),
        confidence=0.6,
    )


class TestMessage:

    def test_role_string_is_coerced(self) -> None:
        assert Message(role="assistant", content="hi").role == MessageRole.ASSISTANT

    def test_unknown_role_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Message(role="narrator", content="hi")

    def test_history_helpers(self) -> None:
        history = [Message.user("a"), Message.assistant("b"), Message.user("c")]

        assert [m.content for m in user_messages(history)] == ["a", "c"]
        assert [m.content for m in recent(history, 2)] == ["b", "c"]
        assert recent(history, 0) == []


class TestEmotionalState:

    @pytest.mark.parametrize("intensity", [0, 11, 5.5, True])
    def test_intensity_out_of_range_rejected(self, intensity) -> None:
        with pytest.raises(ValidationError):
            EmotionalState(primary_emotion="sad", intensity=intensity)

    def test_emotion_is_normalized(self) -> None:
        state = EmotionalState(primary_emotion="  Anxious ", intensity=3)

        assert state.primary_emotion == "anxious"
        assert state.describes("ANXIOUS")


class TestPreferenceProfile:

    @pytest.mark.parametrize("comfort,depth", [(2, "surface"), (5, "moderate"), (7, "deep")])
    def test_conversation_depth(self, comfort: int, depth: str) -> None:
        assert _profile(comfort).conversation_depth == depth

    def test_dial_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CommunicationStyle(directness=0, warmth=5, structure=5, pace=5)

    def test_confidence_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TherapeuticPreferenceProfile(
                primary_modality=TherapeuticModality.CBT,
                secondary_modality=TherapeuticModality.HUMANISTIC,
                vulnerability_comfort=5,
                change_beliefs=ChangeBelief.GRADUAL,
                communication_style=CommunicationStyle(5, 5, 5, 5),
                confidence=1.5,
            )

    def test_modality_coercion(self) -> None:
        assert TherapeuticModality.coerce(" CBT ") == TherapeuticModality.CBT
        assert TherapeuticModality.coerce("unknown") == TherapeuticModality.HUMANISTIC
        assert TherapeuticModality.coerce(None) == TherapeuticModality.HUMANISTIC


class TestRiskLevels:

    @pytest.mark.parametrize("score,level", [
        (0, CrisisRiskLevel.LOW),
        (4, CrisisRiskLevel.LOW),
        (5, CrisisRiskLevel.MODERATE),
        (10, CrisisRiskLevel.HIGH),
        (15, CrisisRiskLevel.CRITICAL),
        (40, CrisisRiskLevel.CRITICAL),
    ])
    def test_thresholds(self, score: int, level: CrisisRiskLevel) -> None:
        assert CrisisRiskLevel.from_score(score) == level

    def test_only_high_and_critical_short_circuit(self) -> None:
        assert not CrisisRiskLevel.MODERATE.requires_safety_response
        assert CrisisRiskLevel.HIGH.requires_safety_response

    def test_crisis_response_serializes_without_modality(self) -> None:
        assessment = CrisisAssessment(risk_score=20, risk_level=CrisisRiskLevel.CRITICAL)

        data = TherapeuticResponse(content="x", crisis_assessment=assessment).to_dict()

        assert data["modality"] == "crisis_response"
        assert data["risk_level"] == "critical"
