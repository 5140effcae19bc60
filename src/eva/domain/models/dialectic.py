"""
Dialectic Session Domain Model

A dialectic is a guided question/answer exchange designed to surface
a belief on one focus area.

State machine:
    POSED -> ANSWERED -> ANALYZED

There is no terminal cleanup state. A session can be reopened by
posing a new question for a different focus area.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional
from uuid import UUID, uuid4

from eva.domain.errors import ValidationError


class FocusArea(StrEnum):
    """Belief areas a dialectic can explore."""

    THERAPEUTIC_APPROACH = "therapeutic_approach"
    VULNERABILITY = "vulnerability"
    CHANGE_BELIEFS = "change_beliefs"
    SELF_EFFICACY = "self_efficacy"
    MEANING_MAKING = "meaning_making"

    @classmethod
    def coerce(cls, value: "FocusArea | str | None") -> "FocusArea":
        """Unknown focus areas fall back to the therapeutic approach."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.THERAPEUTIC_APPROACH


class DialecticState(StrEnum):
    """Session lifecycle states."""

    POSED = "posed"
    """Question asked, waiting for an answer."""

    ANSWERED = "answered"
    """Free-text answer recorded."""

    ANALYZED = "analyzed"
    """Beliefs extracted and follow-up produced."""


@dataclass
class DialecticSession:
    """
    A single guided-question session.

    Attributes:
        user_id: Person being asked
        focus_area: Belief area explored
        question: Fixed question text
        follow_up_question: Fixed follow-up question text
        state: Current lifecycle state
        answer: Recorded free-text answer
        extracted_beliefs: Belief tags found in the answer
        insights: Insight statements derived from the answer
        follow_up: Generated follow-up message
        reflection_prompt: Generated reflection question
        external_id: Belief store dialectic identifier, when one exists
    """

    user_id: str
    focus_area: FocusArea
    question: str
    follow_up_question: str = ""
    id: UUID = field(default_factory=uuid4)
    state: DialecticState = DialecticState.POSED
    answer: Optional[str] = None
    extracted_beliefs: list[str] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)
    therapeutic_indicators: dict[str, bool] = field(default_factory=dict)
    follow_up: Optional[str] = None
    reflection_prompt: Optional[str] = None
    external_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def record_answer(self, answer: str) -> None:
        """Move POSED (or a re-answered session) to ANSWERED."""
        if answer is None or not answer.strip():
            raise ValidationError("Answer must not be empty", "answer")
        self.answer = answer
        self.extracted_beliefs = []
        self.insights = []
        self.therapeutic_indicators = {}
        self.follow_up = None
        self.reflection_prompt = None
        self.state = DialecticState.ANSWERED
        self._touch()

    def record_analysis(
        self,
        beliefs: list[str],
        insights: list[str],
        indicators: dict[str, bool],
        follow_up: str,
        reflection_prompt: str,
    ) -> None:
        """Move ANSWERED to ANALYZED."""
        if self.state != DialecticState.ANSWERED:
            raise ValidationError(
                f"Cannot analyze a session in state {self.state.value}", "state"
            )
        self.extracted_beliefs = list(beliefs)
        self.insights = list(insights)
        self.therapeutic_indicators = dict(indicators)
        self.follow_up = follow_up
        self.reflection_prompt = reflection_prompt
        self.state = DialecticState.ANALYZED
        self._touch()

    def repose(self, focus_area: FocusArea, question: str, follow_up_question: str) -> None:
        """Reopen the session with a new question."""
        self.focus_area = focus_area
        self.question = question
        self.follow_up_question = follow_up_question
        self.answer = None
        self.extracted_beliefs = []
        self.insights = []
        self.therapeutic_indicators = {}
        self.follow_up = None
        self.reflection_prompt = None
        self.external_id = None
        self.state = DialecticState.POSED
        self._touch()

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "focus_area": self.focus_area.value,
            "question": self.question,
            "state": self.state.value,
            "beliefs": list(self.extracted_beliefs),
            "insights": list(self.insights),
            "follow_up": self.follow_up,
            "reflection_prompt": self.reflection_prompt,
            "external_id": self.external_id,
        }


@dataclass(frozen=True)
class DialecticTurnResult:
    """
    Result handed back to the caller after an answer is analyzed.

    Attributes:
        follow_up: Follow-up message
        reflection: Reflection prompt
        beliefs: Belief tags extracted from the answer
        insights: Insight statements
        therapeutic_indicators: Modalities the answer points toward
    """

    follow_up: str
    reflection: str
    beliefs: tuple[str, ...] = ()
    insights: tuple[str, ...] = ()
    therapeutic_indicators: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "follow_up": self.follow_up,
            "reflection": self.reflection,
            "beliefs": list(self.beliefs),
            "insights": list(self.insights),
            "therapeutic_indicators": list(self.therapeutic_indicators),
        }
