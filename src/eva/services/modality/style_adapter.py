"""
Communication Style Adapter

Lexical post-processing of generated text so that its phrasing
matches a person's communication style.

Adaptation is lexical, not semantic: fixed phrasings are rewritten
and a warm phrase may be inserted. Phrase choice is driven by an
injected random source so output is reproducible under test.
"""

import random
from typing import Optional

from eva.domain.models.preference_profile import CommunicationStyle


class StyleAdapter:
    """
    Rewrites generated text for a communication style.

    Rules:
    - directness <= 4: direct phrasings become softer equivalents
    - directness >= 7: softer phrasings become direct equivalents
    - warmth >= 9: one warm phrase after the first sentence, unless
      a warm marker is already present

    Usage:
        adapter = StyleAdapter(random.Random(7))
        text = adapter.adapt(generated, profile.communication_style)
    """

    SOFTEN: tuple[tuple[str, str], ...] = (
        ("You should", "You might consider"),
        ("You need to", "It could be helpful to"),
        ("I recommend", "I wonder if"),
        ("Try this", "Perhaps you could explore"),
    )

    HARDEN: tuple[tuple[str, str], ...] = tuple((soft, direct) for direct, soft in SOFTEN)

    WARM_PHRASES: tuple[str, ...] = (
        "I hear you",
        "That sounds really challenging",
        "I appreciate you sharing that",
        "You're doing important work",
        "I'm here with you",
    )

    WARM_MARKERS: tuple[str, ...] = ("I hear you", "That sounds") + WARM_PHRASES

    LOW_DIRECTNESS: int = 4
    HIGH_DIRECTNESS: int = 7
    HIGH_WARMTH: int = 9

    SENTENCE_BREAK: str = ". "

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        """
        Initialize adapter.

        Args:
            rng: Random source for warm-phrase choice (seed it in tests)
        """
        self._rng = rng or random.Random()

    def adapt(self, text: str, style: Optional[CommunicationStyle]) -> str:
        """
        Adapt generated text to a communication style.

        Args:
            text: Generated text
            style: Target communication style (None leaves text unchanged)

        Returns:
            Adapted text
        """
        if not text or style is None:
            return text

        adapted = text
        if style.directness <= self.LOW_DIRECTNESS:
            adapted = self.soften(adapted)
        elif style.directness >= self.HIGH_DIRECTNESS:
            adapted = self.harden(adapted)

        if style.warmth >= self.HIGH_WARMTH:
            adapted = self.add_warmth(adapted)

        return adapted

    def soften(self, text: str) -> str:
        return _replace_all(text, self.SOFTEN)

    def harden(self, text: str) -> str:
        return _replace_all(text, self.HARDEN)

    def add_warmth(self, text: str) -> str:
        """Insert one warm phrase after the first sentence."""
        if any(marker in text for marker in self.WARM_MARKERS):
            return text

        sentences = text.split(self.SENTENCE_BREAK)
        if len(sentences) < 2:
            return text

        sentences.insert(1, self._rng.choice(self.WARM_PHRASES))
        return self.SENTENCE_BREAK.join(sentences)


def _replace_all(text: str, pairs: tuple[tuple[str, str], ...]) -> str:
    for old, new in pairs:
        text = text.replace(old, new)
    return text
