"""
Modality Configuration

Static, immutable configuration for each therapeutic modality:
instruction fragment, technique vocabulary, exercises, default
communication style and fallback text.

CLINICAL_REVIEW_REQUIRED: Instruction fragments, exercises and
fallback sentences should be validated by mental health
professionals before production deployment.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from eva.domain.enums.therapeutic_modality import TherapeuticModality
from eva.domain.models.preference_profile import CommunicationStyle


_BOUNDARY_NOTE = (
    "Always maintain professional boundaries and refer to crisis resources if needed."
)


@dataclass(frozen=True)
class ModalityConfig:
    """
    Configuration for one therapeutic modality.

    Attributes:
        modality: Modality this entry configures
        name: Human-readable name
        description: One-line description
        instruction: Base system instruction fragment
        techniques: Technique vocabulary
        exercises: Suggested exercises, most relevant first
        style: Default communication style
    """

    modality: TherapeuticModality
    name: str
    description: str
    instruction: str
    techniques: tuple[str, ...]
    exercises: tuple[str, ...]
    style: CommunicationStyle


def _instruction(label: str, *approach: str) -> str:
    lines = [f"You are {label} therapeutic assistant. Your approach is:"]
    lines.extend(f"- {item}" for item in approach)
    lines.append("")
    lines.append(_BOUNDARY_NOTE)
    return "\n".join(lines)


# Default communication style per modality: (directness, warmth, structure, pace)
COMMUNICATION_STYLES: Mapping[TherapeuticModality, CommunicationStyle] = MappingProxyType({
    TherapeuticModality.CBT: CommunicationStyle(8, 6, 9, 7),
    TherapeuticModality.HUMANISTIC: CommunicationStyle(4, 9, 3, 5),
    TherapeuticModality.MINDFULNESS: CommunicationStyle(5, 7, 5, 3),
    TherapeuticModality.PSYCHODYNAMIC: CommunicationStyle(6, 7, 6, 4),
    TherapeuticModality.EXISTENTIAL: CommunicationStyle(7, 6, 4, 5),
    TherapeuticModality.SOMATIC: CommunicationStyle(5, 8, 5, 2),
    TherapeuticModality.SOLUTION_FOCUSED: CommunicationStyle(7, 7, 7, 8),
    TherapeuticModality.DIALECTICAL_BEHAVIORAL: CommunicationStyle(6, 7, 8, 6),
    TherapeuticModality.NARRATIVE: CommunicationStyle(5, 8, 5, 4),
    TherapeuticModality.ACCEPTANCE_COMMITMENT: CommunicationStyle(6, 7, 6, 5),
})


def communication_style(modality: TherapeuticModality | str | None) -> CommunicationStyle:
    """
    Default communication style for a modality.

    Unknown modalities get the humanistic style.
    """
    return COMMUNICATION_STYLES[TherapeuticModality.coerce(modality)]


# CLINICAL_REVIEW_REQUIRED
_CONFIGS: tuple[ModalityConfig, ...] = (
    ModalityConfig(
        modality=TherapeuticModality.CBT,
        name="Cognitive Behavioral Therapy",
        description=(
            "Structured, solution-focused approach that helps identify and change "
            "unhelpful thinking patterns"
        ),
        instruction=_instruction(
            "a CBT-focused",
            "Structured and goal-oriented",
            "Focus on identifying cognitive distortions and behavioral patterns",
            "Solution-focused with practical strategies",
            "Direct but warm in communication",
            "Help users develop coping skills and thought awareness",
        ),
        techniques=(
            "thought records", "cognitive restructuring", "behavioral activation",
            "evidence examination", "problem-solving",
        ),
        exercises=(
            "thought_records", "behavioral_experiments",
            "cognitive_restructuring", "exposure_therapy",
        ),
        style=COMMUNICATION_STYLES[TherapeuticModality.CBT],
    ),
    ModalityConfig(
        modality=TherapeuticModality.HUMANISTIC,
        name="Humanistic Therapy",
        description=(
            "Growth-oriented approach focused on self-actualization and "
            "unconditional positive regard"
        ),
        instruction=_instruction(
            "a humanistic",
            "Growth-oriented and non-directive",
            "Focus on self-actualization and personal potential",
            "Unconditional positive regard and empathy",
            "Warm, reflective, and non-judgmental",
            "Help users discover their authentic selves and values",
        ),
        techniques=(
            "reflective listening", "unconditional positive regard", "empathic reflection",
            "values exploration", "self-compassion",
        ),
        exercises=(
            "values_clarification", "self_compassion_practices",
            "authenticity_exploration", "growth_mindset_work",
        ),
        style=COMMUNICATION_STYLES[TherapeuticModality.HUMANISTIC],
    ),
    ModalityConfig(
        modality=TherapeuticModality.MINDFULNESS,
        name="Mindfulness & Acceptance Therapy",
        description=(
            "Present-moment focused approach emphasizing acceptance and "
            "non-judgmental awareness"
        ),
        instruction=_instruction(
            "a mindfulness-focused",
            "Present-moment awareness and acceptance",
            "Non-judgmental observation of thoughts and feelings",
            "Gentle guidance toward mindful awareness",
            "Calm, slow-paced, and contemplative",
            "Help users develop acceptance and mindful presence",
        ),
        techniques=(
            "breath awareness", "body scan", "noting", "grounding", "acceptance",
        ),
        exercises=(
            "meditation", "body_scans", "mindful_awareness", "acceptance_practices",
        ),
        style=COMMUNICATION_STYLES[TherapeuticModality.MINDFULNESS],
    ),
    ModalityConfig(
        modality=TherapeuticModality.PSYCHODYNAMIC,
        name="Psychodynamic Therapy",
        description=(
            "Insight-oriented approach exploring unconscious patterns and "
            "relationship dynamics"
        ),
        instruction=_instruction(
            "a psychodynamic",
            "Insight-oriented and exploratory",
            "Focus on unconscious patterns and relationship dynamics",
            "Reflective and interpretive",
            "Warm but analytical",
            "Help users gain insight into underlying patterns",
        ),
        techniques=(
            "pattern exploration", "free association", "interpretation",
            "relationship reflection", "insight building",
        ),
        exercises=(
            "pattern_recognition", "relationship_exploration",
            "insight_journaling", "dream_analysis",
        ),
        style=COMMUNICATION_STYLES[TherapeuticModality.PSYCHODYNAMIC],
    ),
    ModalityConfig(
        modality=TherapeuticModality.EXISTENTIAL,
        name="Existential Therapy",
        description="Meaning-focused approach exploring purpose, choice, and responsibility",
        instruction=_instruction(
            "an existential",
            "Meaning-focused and philosophical",
            "Explore questions of purpose, choice, and responsibility",
            "Authentic and direct about life's challenges",
            "Help users find meaning and make authentic choices",
            "Address fundamental human concerns",
        ),
        techniques=(
            "meaning exploration", "responsibility framing", "authentic choice",
            "confronting givens", "purpose inquiry",
        ),
        exercises=(
            "meaning_exploration", "values_clarification",
            "authentic_choice_work", "purpose_discovery",
        ),
        style=COMMUNICATION_STYLES[TherapeuticModality.EXISTENTIAL],
    ),
    ModalityConfig(
        modality=TherapeuticModality.SOMATIC,
        name="Somatic Therapy",
        description="Body-based approach building awareness of physical sensation and regulation",
        instruction=_instruction(
            "a somatic",
            "Body-centered and sensation-aware",
            "Focus on physical sensations, tension and nervous system regulation",
            "Slow, gentle, and grounding",
            "Invite noticing rather than analyzing",
            "Help users feel safe and settled in their bodies",
        ),
        techniques=(
            "body awareness", "grounding", "titration", "resourcing", "orienting",
        ),
        exercises=(
            "body_scans", "grounding_techniques", "progressive_relaxation", "orienting_practice",
        ),
        style=COMMUNICATION_STYLES[TherapeuticModality.SOMATIC],
    ),
    ModalityConfig(
        modality=TherapeuticModality.SOLUTION_FOCUSED,
        name="Solution-Focused Brief Therapy",
        description="Brief, future-focused approach building on strengths and exceptions",
        instruction=_instruction(
            "a solution-focused",
            "Future-focused and brief",
            "Build on strengths, resources and what already works",
            "Look for exceptions to the problem",
            "Clear, practical, and encouraging",
            "Help users define small, achievable next steps",
        ),
        techniques=(
            "miracle question", "scaling questions", "exception finding",
            "strengths identification", "goal setting",
        ),
        exercises=(
            "miracle_question", "scaling_exercise", "exception_finding", "small_steps_planning",
        ),
        style=COMMUNICATION_STYLES[TherapeuticModality.SOLUTION_FOCUSED],
    ),
    ModalityConfig(
        modality=TherapeuticModality.DIALECTICAL_BEHAVIORAL,
        name="Dialectical Behavior Therapy",
        description="Skills-based approach balancing acceptance and change",
        instruction=_instruction(
            "a DBT-informed",
            "Balance acceptance with change",
            "Teach practical skills for distress tolerance and emotion regulation",
            "Structured and validating",
            "Look for the middle path between extremes",
            "Help users build interpersonal effectiveness",
        ),
        techniques=(
            "distress tolerance", "emotion regulation", "wise mind",
            "radical acceptance", "opposite action",
        ),
        exercises=(
            "distress_tolerance_skills", "emotion_regulation_practice",
            "wise_mind_exercise", "interpersonal_effectiveness",
        ),
        style=COMMUNICATION_STYLES[TherapeuticModality.DIALECTICAL_BEHAVIORAL],
    ),
    ModalityConfig(
        modality=TherapeuticModality.NARRATIVE,
        name="Narrative Therapy",
        description="Story-based approach that externalizes problems and reauthors identity",
        instruction=_instruction(
            "a narrative",
            "Curious about the stories people tell about their lives",
            "Separate the person from the problem",
            "Look for unique outcomes that contradict the dominant story",
            "Warm, collaborative, and respectful of agency",
            "Help users reauthor a preferred story",
        ),
        techniques=(
            "externalizing", "reauthoring", "unique outcomes",
            "preferred story", "deconstruction",
        ),
        exercises=(
            "externalizing_conversation", "life_story_mapping",
            "unique_outcome_journaling", "preferred_story_writing",
        ),
        style=COMMUNICATION_STYLES[TherapeuticModality.NARRATIVE],
    ),
    ModalityConfig(
        modality=TherapeuticModality.ACCEPTANCE_COMMITMENT,
        name="Acceptance and Commitment Therapy",
        description="Flexibility-focused approach linking acceptance to value-based action",
        instruction=_instruction(
            "an ACT-informed",
            "Build psychological flexibility",
            "Make room for difficult thoughts and feelings",
            "Clarify values and commit to value-based action",
            "Compassionate, experiential, and present-focused",
            "Help users unhook from unhelpful thoughts",
        ),
        techniques=(
            "cognitive defusion", "acceptance", "values clarification",
            "committed action", "self-as-context",
        ),
        exercises=(
            "values_clarification", "defusion_exercises",
            "committed_action_planning", "willingness_practice",
        ),
        style=COMMUNICATION_STYLES[TherapeuticModality.ACCEPTANCE_COMMITMENT],
    ),
)

MODALITY_CONFIGS: Mapping[TherapeuticModality, ModalityConfig] = MappingProxyType(
    {config.modality: config for config in _CONFIGS}
)


def get_modality_config(modality: TherapeuticModality | str | None) -> ModalityConfig:
    """Configuration for a modality; unknown modalities get humanistic."""
    return MODALITY_CONFIGS[TherapeuticModality.coerce(modality)]


# Used when the generation service is unavailable
FALLBACK_RESPONSES: Mapping[TherapeuticModality, str] = MappingProxyType({
    TherapeuticModality.CBT: (
        "I notice you're sharing some challenging thoughts. Would you be open to "
        "exploring what might be contributing to these patterns?"
    ),
    TherapeuticModality.HUMANISTIC: (
        "I hear you, and I want you to know that your experience matters. "
        "What feels most important to you right now?"
    ),
    TherapeuticModality.MINDFULNESS: (
        "I sense you're going through something difficult. What would it be like "
        "to simply notice these feelings without trying to change them?"
    ),
    TherapeuticModality.PSYCHODYNAMIC: (
        "I wonder if there might be deeper patterns at play here. "
        "What comes to mind when you reflect on this?"
    ),
    TherapeuticModality.EXISTENTIAL: (
        "This sounds like it touches on some fundamental questions. "
        "What meaning are you finding in this experience?"
    ),
})


def fallback_response(modality: TherapeuticModality | str | None) -> str:
    """Fixed fallback sentence; modalities without one use humanistic's."""
    resolved = TherapeuticModality.coerce(modality)
    return FALLBACK_RESPONSES.get(resolved, FALLBACK_RESPONSES[TherapeuticModality.HUMANISTIC])
