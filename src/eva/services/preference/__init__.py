"""Preference inference package."""

from eva.services.preference.inference_engine import PreferenceInferenceEngine
from eva.services.preference.readiness import (
    PreferenceEvolution,
    TherapeuticReadiness,
    assess_readiness,
    compare_profiles,
)

__all__ = [
    "PreferenceInferenceEngine",
    "PreferenceEvolution",
    "TherapeuticReadiness",
    "assess_readiness",
    "compare_profiles",
]
