"""
Keyword Matcher

Case-insensitive substring matching over a fixed keyword list.
Every rule-based decision in the core (crisis scoring, modality
inference, dialectic belief extraction) goes through this class.

KNOWN LIMITATION: Matching is plain substring containment on the
lowercased text. A keyword matches inside longer words ("present"
inside "represent", "hopeless" inside "hopelessness") and negation is
not understood ("not hopeless" still matches). This is the accepted
behavior of the product; do not replace it with stemming or NLP
without clinical sign-off.
"""

import re
from dataclasses import dataclass
from typing import Iterable


def normalize_text(text: str) -> str:
    """
    Lowercase text and collapse whitespace runs.

    Curly apostrophes are folded to ASCII so "can’t" and "can't"
    match the same keyword.
    """
    if not text:
        return ""
    text = text.replace("’", "'").replace("‘", "'")
    return re.sub(r"\s+", " ", text.strip()).lower()


@dataclass(frozen=True)
class KeywordMatcher:
    """
    A named, ordered keyword list.

    Attributes:
        name: Label used in logs and risk factors
        keywords: Lowercase keywords, matched in declaration order
    """

    name: str
    keywords: tuple[str, ...]

    @classmethod
    def of(cls, name: str, keywords: Iterable[str]) -> "KeywordMatcher":
        seen: dict[str, None] = {}
        for keyword in keywords:
            seen.setdefault(keyword.lower(), None)
        return cls(name=name, keywords=tuple(seen))

    def find(self, text: str) -> list[str]:
        """
        Find distinct keywords present in text.

        Each keyword is reported at most once no matter how often
        it occurs.

        Args:
            text: Raw or normalized text

        Returns:
            Matched keywords, in declaration order
        """
        text_lower = normalize_text(text)
        if not text_lower:
            return []
        return [keyword for keyword in self.keywords if keyword in text_lower]

    def count(self, text: str) -> int:
        """Number of distinct keywords present in text."""
        return len(self.find(text))

    def matches_any(self, text: str) -> bool:
        """Whether at least one keyword is present in text."""
        text_lower = normalize_text(text)
        return any(keyword in text_lower for keyword in self.keywords) if text_lower else False

    def __contains__(self, keyword: str) -> bool:
        return keyword.lower() in self.keywords

    def __len__(self) -> int:
        return len(self.keywords)
