"""
EVA Domain Layer

Core entities and value objects for crisis screening, preference
inference, routing and dialectic sessions. Independent of any
collaborator or transport.
"""

from eva.domain.enums import ChangeBelief, TherapeuticModality
from eva.domain.errors import EvaError, ValidationError
from eva.domain.models import (
    CommunicationStyle,
    CrisisAssessment,
    CrisisResponse,
    CrisisRiskLevel,
    DialecticSession,
    DialecticState,
    DialecticTurnResult,
    EmotionalState,
    FocusArea,
    Message,
    MessageRole,
    ProfileSource,
    SafetyPlan,
    SupportResource,
    TherapeuticPreferenceProfile,
    TherapeuticResponse,
)

__all__ = [
    "ChangeBelief",
    "TherapeuticModality",
    "EvaError",
    "ValidationError",
    "CommunicationStyle",
    "CrisisAssessment",
    "CrisisResponse",
    "CrisisRiskLevel",
    "DialecticSession",
    "DialecticState",
    "DialecticTurnResult",
    "EmotionalState",
    "FocusArea",
    "Message",
    "MessageRole",
    "ProfileSource",
    "SafetyPlan",
    "SupportResource",
    "TherapeuticPreferenceProfile",
    "TherapeuticResponse",
]
