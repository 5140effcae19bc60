"""
Therapeutic Response

The value handed back to the transport layer for every processed
message, whether it came from modality routing or the safety path.
"""

from dataclasses import dataclass, field
from typing import Optional

from eva.domain.enums.therapeutic_modality import TherapeuticModality
from eva.domain.models.preference_profile import TherapeuticPreferenceProfile
from eva.domain.models.risk_models import CrisisAssessment
from eva.domain.models.safety_plan import CrisisResponse, SafetyPlan


@dataclass
class TherapeuticResponse:
    """
    Response to one user message.

    Attributes:
        content: Text shown to the person
        modality: Modality used; None on the crisis path
        suggested_exercises: Up to three exercise identifiers
        conversation_depth: surface, moderate, deep or crisis
        confidence: Confidence in the preference inference
        crisis_assessment: Assessment that gated this response
        profile: Preference profile used for routing
        crisis_response: Templated crisis response (crisis path only)
        safety_plan: Personalized safety plan (crisis path only)
        used_fallback: Whether fixed fallback text replaced generation
    """

    content: str
    modality: Optional[TherapeuticModality] = None
    suggested_exercises: list[str] = field(default_factory=list)
    conversation_depth: str = "moderate"
    confidence: float = 0.5
    crisis_assessment: Optional[CrisisAssessment] = None
    profile: Optional[TherapeuticPreferenceProfile] = None
    crisis_response: Optional[CrisisResponse] = None
    safety_plan: Optional[SafetyPlan] = None
    used_fallback: bool = False

    @property
    def requires_immediate_attention(self) -> bool:
        return self.crisis_response is not None

    def to_dict(self) -> dict:
        """Serialize for the transport layer."""
        data = {
            "content": self.content,
            "modality": self.modality.value if self.modality else "crisis_response",
            "suggested_exercises": list(self.suggested_exercises),
            "conversation_depth": self.conversation_depth,
            "confidence": round(self.confidence, 3),
            "requires_immediate_attention": self.requires_immediate_attention,
        }
        if self.crisis_assessment:
            data["risk_level"] = self.crisis_assessment.risk_level.label
        if self.crisis_response:
            data["crisis_resources"] = [r.to_dict() for r in self.crisis_response.resources]
        if self.safety_plan:
            data["safety_plan"] = self.safety_plan.to_dict()
        return data
