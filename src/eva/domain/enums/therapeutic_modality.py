"""
Therapeutic Modality Enumerations

Defines the therapeutic approaches a conversation can be routed to
and the two ways a person may believe change happens.

CLINICAL_REVIEW_REQUIRED: Modality definitions should be validated
by mental health professionals before production deployment.
"""

from enum import StrEnum
from typing import Optional


class TherapeuticModality(StrEnum):
    """
    Therapeutic approach styles.

    Values are the canonical lowercase names used in every keyword
    table, configuration table and external payload.
    """

    CBT = "cbt"
    """Cognitive Behavioral Therapy - structured, thought/behavior focused."""

    HUMANISTIC = "humanistic"
    """Person-centered, growth-oriented, non-directive."""

    MINDFULNESS = "mindfulness"
    """Present-moment awareness and acceptance."""

    PSYCHODYNAMIC = "psychodynamic"
    """Insight into unconscious patterns and relationships."""

    EXISTENTIAL = "existential"
    """Meaning, purpose, choice and responsibility."""

    SOMATIC = "somatic"
    """Body-based awareness and regulation."""

    SOLUTION_FOCUSED = "solution_focused"
    """Brief, future-focused, strengths-based."""

    DIALECTICAL_BEHAVIORAL = "dialectical_behavioral"
    """Balance of acceptance and change, skills training."""

    NARRATIVE = "narrative"
    """Externalizing problems and reauthoring life stories."""

    ACCEPTANCE_COMMITMENT = "acceptance_commitment"
    """Psychological flexibility and value-based action."""

    @classmethod
    def default(cls) -> "TherapeuticModality":
        """Modality used when nothing else can be inferred."""
        return cls.HUMANISTIC

    @classmethod
    def coerce(
        cls,
        value: "TherapeuticModality | str | None",
        default: Optional["TherapeuticModality"] = None,
    ) -> "TherapeuticModality":
        """
        Convert a loose value to a modality.

        Unknown or empty values map to the default modality rather
        than raising, since modality names arrive from collaborators.
        """
        fallback = default or cls.default()
        if value is None:
            return fallback
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return fallback


class ChangeBelief(StrEnum):
    """How a person believes personal change happens."""

    GRADUAL = "gradual"
    """Change happens slowly, over time, as a process."""

    BREAKTHROUGH = "breakthrough"
    """Change happens through sudden realizations."""
