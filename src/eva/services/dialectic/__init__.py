"""Dialectic session package - guided belief-exploration questions."""

from eva.services.dialectic.dialectic_manager import (
    BELIEF_RULES,
    PROMPTS,
    BeliefAnalysis,
    DialecticSessionManager,
    FocusSuggestion,
    analyze_answer,
    suggest_focus_areas,
)

__all__ = [
    "DialecticSessionManager",
    "BeliefAnalysis",
    "FocusSuggestion",
    "analyze_answer",
    "suggest_focus_areas",
    "PROMPTS",
    "BELIEF_RULES",
]
