"""
Therapeutic Readiness and Preference Evolution

Summaries derived from preference profiles: how ready a person seems
for deeper therapeutic work, and how their preferences shifted
between two inferences.
"""

from dataclasses import dataclass, field

from eva.domain.models.preference_profile import TherapeuticPreferenceProfile


@dataclass(frozen=True)
class TherapeuticReadiness:
    """
    Readiness summary.

    Attributes:
        overall_score: 0-5
        strengths: Observed strengths
        areas_for_growth: Areas to build on
    """

    overall_score: int = 0
    strengths: tuple[str, ...] = field(default_factory=tuple)
    areas_for_growth: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "overall_score": self.overall_score,
            "strengths": list(self.strengths),
            "areas_for_growth": list(self.areas_for_growth),
        }


@dataclass(frozen=True)
class PreferenceEvolution:
    """Change between two profiles."""

    modality_shift: bool
    vulnerability_change: int
    confidence_change: float

    def to_dict(self) -> dict:
        return {
            "modality_shift": self.modality_shift,
            "vulnerability_change": self.vulnerability_change,
            "confidence_change": round(self.confidence_change, 3),
        }


MAX_READINESS_SCORE = 5


def assess_readiness(profile: TherapeuticPreferenceProfile) -> TherapeuticReadiness:
    """
    Assess therapeutic readiness from a profile.

    Scoring:
    - vulnerability comfort >= 7: strength, +2
    - vulnerability comfort <= 3: area for growth
    - confidence >= 0.8: strength, +2
    - a stated change belief: strength, +1
    """
    score = 0
    strengths: list[str] = []
    growth: list[str] = []

    if profile.vulnerability_comfort >= 7:
        strengths.append("High openness to emotional exploration")
        score += 2
    elif profile.vulnerability_comfort <= 3:
        growth.append("Building comfort with vulnerability")

    if profile.confidence >= 0.8:
        strengths.append("Clear therapeutic preferences")
        score += 2

    if profile.change_beliefs:
        strengths.append("Belief in personal growth and change")
        score += 1

    return TherapeuticReadiness(
        overall_score=min(score, MAX_READINESS_SCORE),
        strengths=tuple(strengths),
        areas_for_growth=tuple(growth),
    )


def compare_profiles(
    previous: TherapeuticPreferenceProfile,
    current: TherapeuticPreferenceProfile,
) -> PreferenceEvolution:
    """Compute how preferences changed from `previous` to `current`."""
    return PreferenceEvolution(
        modality_shift=previous.primary_modality != current.primary_modality,
        vulnerability_change=current.vulnerability_comfort - previous.vulnerability_comfort,
        confidence_change=current.confidence - previous.confidence,
    )
