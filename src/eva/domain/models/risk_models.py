"""
Risk Models

Data models for crisis risk assessment.

SAFETY-CRITICAL: This module defines the single risk classification
used by every caller. There is no second, coarser level scale.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum


class CrisisRiskLevel(IntEnum):
    """
    Crisis risk level classification.

    Higher values indicate higher risk. Comparisons are ordinal:
    `level >= CrisisRiskLevel.HIGH` is the routing short-circuit test.

    LEGAL_REVIEW_REQUIRED: Risk level definitions and their
    associated actions have legal and clinical implications.
    """

    LOW = 1
    """No concerning language or state detected."""

    MODERATE = 2
    """
    Concerning signals present.
    - Normal therapeutic routing continues
    - Generation instructions carry a safety clause
    """

    HIGH = 3
    """
    Active risk.
    - Modality routing is skipped
    - Safety plan generator is the sole response source
    """

    CRITICAL = 4
    """
    Immediate safety concern.

    SAFETY_NOTE: At this level, every response MUST include
    crisis resources and a follow-up.
    """

    @property
    def label(self) -> str:
        """Lowercase label used in payloads (low, moderate, high, critical)."""
        return self.name.lower()

    @property
    def requires_safety_response(self) -> bool:
        """Whether this level short-circuits modality routing."""
        return self >= CrisisRiskLevel.HIGH

    @classmethod
    def from_score(cls, score: int) -> "CrisisRiskLevel":
        """Classify a crisis score against the fixed thresholds."""
        if score >= 15:
            return cls.CRITICAL
        if score >= 10:
            return cls.HIGH
        if score >= 5:
            return cls.MODERATE
        return cls.LOW


@dataclass(frozen=True)
class CrisisAssessment:
    """
    Result of scoring a single message for crisis risk.

    Created fresh per message and never persisted by the core.

    Attributes:
        risk_score: Additive, non-negative score
        risk_level: Classified risk level
        risk_factors: Labels of every contribution to the score
        timestamp: When the assessment was made
    """

    risk_score: int = 0
    risk_level: CrisisRiskLevel = CrisisRiskLevel.LOW
    risk_factors: frozenset[str] = field(default_factory=frozenset)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def requires_safety_response(self) -> bool:
        return self.risk_level.requires_safety_response

    @property
    def has_indicators(self) -> bool:
        """Whether any risk factor contributed at all."""
        return bool(self.risk_factors)

    def to_dict(self) -> dict:
        return {
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.label,
            "risk_factors": sorted(self.risk_factors),
        }

    def to_audit_record(self) -> dict:
        """Create audit record for the persistence collaborator."""
        return {
            **self.to_dict(),
            "timestamp": self.timestamp.isoformat(),
            "intervention_triggered": self.requires_safety_response,
        }
