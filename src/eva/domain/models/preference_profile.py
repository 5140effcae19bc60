"""
Therapeutic Preference Profile

The inferred picture of how a person prefers to be supported:
which modality, how comfortable they are with vulnerability,
how they believe change happens, and how they like to be spoken to.

ARCHITECTURE: Profiles are recomputed on demand from conversation
history. When the external belief store answers, its profile is
authoritative and overrides local computation.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Mapping

from eva.domain.enums.therapeutic_modality import ChangeBelief, TherapeuticModality
from eva.domain.errors import ValidationError


class ProfileSource(StrEnum):
    """Where a profile came from."""

    EXTERNAL = "external"
    LOCAL = "local"


def _check_dial(name: str, value: int) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or not 1 <= value <= 10:
        raise ValidationError(f"{name} must be an integer 1-10, got {value!r}", name)
    return value


@dataclass(frozen=True)
class CommunicationStyle:
    """
    How generated text should be phrased.

    Each dial is on a 1-10 scale.

    Attributes:
        directness: Advice-giving vs. question-asking
        warmth: Emotional warmth of phrasing
        structure: How structured/step-based responses are
        pace: How quickly the conversation moves
    """

    directness: int
    warmth: int
    structure: int
    pace: int

    def __post_init__(self) -> None:
        for name in ("directness", "warmth", "structure", "pace"):
            _check_dial(name, getattr(self, name))

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.directness, self.warmth, self.structure, self.pace)

    def to_dict(self) -> dict:
        return {
            "directness": self.directness,
            "warmth": self.warmth,
            "structure": self.structure,
            "pace": self.pace,
        }


@dataclass(frozen=True)
class TherapeuticPreferenceProfile:
    """
    Inferred therapeutic preferences.

    Attributes:
        primary_modality: Best-matching modality
        secondary_modality: Runner-up modality
        vulnerability_comfort: Ease with emotional openness (1-10)
        change_beliefs: Gradual vs. breakthrough change
        communication_style: Phrasing dials
        confidence: Confidence in the inference (0.0-1.0)
        source: External belief store or local keyword scoring
        modality_scores: Per-modality keyword hit counts (local only)
    """

    primary_modality: TherapeuticModality
    secondary_modality: TherapeuticModality
    vulnerability_comfort: int
    change_beliefs: ChangeBelief
    communication_style: CommunicationStyle
    confidence: float
    source: ProfileSource = ProfileSource.LOCAL
    modality_scores: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_dial("vulnerability_comfort", self.vulnerability_comfort)
        if not 0.0 <= self.confidence <= 1.0:
            raise ValidationError(
                f"confidence must be 0.0-1.0, got {self.confidence}", "confidence"
            )

    @property
    def conversation_depth(self) -> str:
        """Depth the conversation can comfortably reach."""
        if self.vulnerability_comfort >= 7:
            return "deep"
        if self.vulnerability_comfort <= 3:
            return "surface"
        return "moderate"

    def to_dict(self) -> dict:
        return {
            "primary_modality": self.primary_modality.value,
            "secondary_modality": self.secondary_modality.value,
            "vulnerability_comfort": self.vulnerability_comfort,
            "change_beliefs": self.change_beliefs.value,
            "communication_style": self.communication_style.to_dict(),
            "confidence": round(self.confidence, 3),
            "source": self.source.value,
        }
