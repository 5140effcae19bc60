"""Domain models package."""

from eva.domain.models.message import EmotionalState, Message, MessageRole
from eva.domain.models.risk_models import CrisisAssessment, CrisisRiskLevel
from eva.domain.models.preference_profile import (
    CommunicationStyle,
    ProfileSource,
    TherapeuticPreferenceProfile,
)
from eva.domain.models.safety_plan import CrisisResponse, SafetyPlan, SupportResource
from eva.domain.models.dialectic import (
    DialecticSession,
    DialecticState,
    DialecticTurnResult,
    FocusArea,
)
from eva.domain.models.therapeutic_response import TherapeuticResponse

__all__ = [
    # Conversation
    "Message",
    "MessageRole",
    "EmotionalState",
    # Risk
    "CrisisAssessment",
    "CrisisRiskLevel",
    # Preferences
    "CommunicationStyle",
    "ProfileSource",
    "TherapeuticPreferenceProfile",
    # Safety plan
    "CrisisResponse",
    "SafetyPlan",
    "SupportResource",
    # Dialectic
    "DialecticSession",
    "DialecticState",
    "DialecticTurnResult",
    "FocusArea",
    # Response
    "TherapeuticResponse",
]
