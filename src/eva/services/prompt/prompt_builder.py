"""
Prompt Builder

Constructs generation requests from a modality configuration,
a communication style and the caller-supplied routing context.

ARCHITECTURE: Instructions are assembled from the modality's fixed
base fragment plus directive clauses keyed by style thresholds.
The safety clause is appended whenever the context calls for it.

CLINICAL_REVIEW_REQUIRED: Directive and safety clauses should be
validated by mental health professionals.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from eva.config.logging_config import get_logger
from eva.domain.models.message import EmotionalState, Message, recent
from eva.domain.models.preference_profile import CommunicationStyle

logger = get_logger(__name__)


@dataclass(frozen=True)
class RoutingContext:
    """
    Per-message context supplied to the router.

    Attributes:
        crisis_indicators: Crisis keywords seen in this or recent messages
        vulnerability_level: Caller's estimate of current vulnerability (1-10)
        emotional_state: Emotional state for this message
    """

    crisis_indicators: bool = False
    vulnerability_level: Optional[int] = None
    emotional_state: Optional[EmotionalState] = None

    @property
    def high_vulnerability(self) -> bool:
        return self.vulnerability_level is not None and self.vulnerability_level >= 7

    @property
    def requires_safety_clause(self) -> bool:
        return self.crisis_indicators or self.high_vulnerability


@dataclass
class GenerationRequest:
    """
    Complete request handed to the generation service.

    Attributes:
        system_instructions: Assembled system instructions
        conversation_history: Recent messages in chat format
        user_message: Current user message
        max_tokens: Suggested max tokens for the reply
        temperature: Suggested temperature setting
    """

    system_instructions: str
    conversation_history: list[dict] = field(default_factory=list)
    user_message: str = ""
    max_tokens: int = 500
    temperature: float = 0.7

    def to_messages(self) -> list[dict]:
        """
        Convert to chat-completion message format.

        Returns:
            List of message dictionaries
        """
        messages = [{"role": "system", "content": self.system_instructions}]
        messages.extend(self.conversation_history)

        if self.user_message:
            messages.append({"role": "user", "content": self.user_message})

        return messages


class PromptBuilder:
    """
    Builds generation requests with style and safety clauses.

    Clauses:
    - directness <= 4: non-directive phrasing
    - directness >= 7: direct phrasing
    - warmth >= 9: high warmth
    - pace <= 3: contemplative pacing
    - crisis indicators or vulnerability >= 7: safety clause
    """

    # CLINICAL_REVIEW_REQUIRED
    NON_DIRECTIVE_CLAUSE: str = (
        "Use gentle, non-directive language. Ask questions rather than give advice."
    )
    DIRECT_CLAUSE: str = (
        "Be direct and clear in your communication. "
        "Offer specific suggestions when appropriate."
    )
    HIGH_WARMTH_CLAUSE: str = "Maintain very warm, empathetic, and supportive communication."
    CONTEMPLATIVE_CLAUSE: str = (
        "Use a slower, more contemplative pace. Allow space for reflection."
    )
    SAFETY_CLAUSE: str = (
        "IMPORTANT: User may be in crisis. Maintain safety, provide crisis resources, "
        "and encourage professional help."
    )
    HIGH_VULNERABILITY_CLAUSE: str = (
        "User is showing high vulnerability. Be extra gentle and supportive."
    )

    MAX_HISTORY: int = 10

    def __init__(
        self,
        history_window: int = MAX_HISTORY,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> None:
        """
        Initialize prompt builder.

        Args:
            history_window: History messages to include (capped at 10)
            max_tokens: Default max tokens for generation
            temperature: Default temperature for generation
        """
        self._history_window = max(0, min(history_window, self.MAX_HISTORY))
        self._max_tokens = max_tokens
        self._temperature = temperature

    def build(
        self,
        instruction: str,
        style: CommunicationStyle,
        context: Optional[RoutingContext] = None,
        history: Sequence[Message] = (),
        user_message: str = "",
    ) -> GenerationRequest:
        """
        Build a generation request.

        Args:
            instruction: Modality base instruction fragment
            style: Communication style driving directive clauses
            context: Routing context (crisis flags, vulnerability)
            history: Conversation history, oldest first
            user_message: Current user message

        Returns:
            GenerationRequest ready for the generation service
        """
        context = context or RoutingContext()
        system_instructions = self.build_instructions(instruction, style, context)

        request = GenerationRequest(
            system_instructions=system_instructions,
            conversation_history=[
                m.to_chat_dict() for m in recent(history, self._history_window)
            ],
            user_message=user_message,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

        logger.debug(
            "Generation request built",
            history_messages=len(request.conversation_history),
            safety_clause=context.requires_safety_clause,
        )

        return request

    def build_instructions(
        self,
        instruction: str,
        style: CommunicationStyle,
        context: RoutingContext,
    ) -> str:
        """Assemble system instructions from the base fragment and clauses."""
        parts = [instruction]

        if style.directness <= 4:
            parts.append(self.NON_DIRECTIVE_CLAUSE)
        elif style.directness >= 7:
            parts.append(self.DIRECT_CLAUSE)

        if style.warmth >= 9:
            parts.append(self.HIGH_WARMTH_CLAUSE)

        if style.pace <= 3:
            parts.append(self.CONTEMPLATIVE_CLAUSE)

        if context.requires_safety_clause:
            parts.append(self.SAFETY_CLAUSE)

        if context.high_vulnerability:
            parts.append(self.HIGH_VULNERABILITY_CLAUSE)

        return "\n\n".join(parts)
