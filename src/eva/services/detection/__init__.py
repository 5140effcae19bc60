"""Detection services package."""

from eva.services.detection.keyword_matcher import KeywordMatcher, normalize_text

__all__ = [
    "KeywordMatcher",
    "normalize_text",
]
