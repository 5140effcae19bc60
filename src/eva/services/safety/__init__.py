"""Safety services package - crisis gate and safety planning."""

from eva.services.safety.crisis_assessor import CrisisRiskAssessor
from eva.services.safety.incident_history import IncidentHistory
from eva.services.safety.safety_plan_generator import CRISIS_RESOURCES, SafetyPlanGenerator

__all__ = [
    # Crisis gate
    "CrisisRiskAssessor",
    "IncidentHistory",
    # Safety planning
    "SafetyPlanGenerator",
    "CRISIS_RESOURCES",
]
