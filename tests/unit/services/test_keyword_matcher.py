"""Unit Tests for KeywordMatcher."""

from eva.services.detection.keyword_matcher import KeywordMatcher, normalize_text


class TestNormalizeText:

    def test_lowercases_and_collapses_whitespace(self) -> None:
        assert normalize_text("  I   Feel\n\tLOST ") == "i feel lost"

    def test_folds_curly_apostrophes(self) -> None:
        assert normalize_text("Can’t") == "can't"

    def test_empty_input(self) -> None:
        assert normalize_text("") == ""
        assert normalize_text(None) == ""


class TestKeywordMatcher:

    def test_deduplicates_keywords_preserving_order(self) -> None:
        matcher = KeywordMatcher.of("demo", ["Calm", "breath", "calm"])

        assert matcher.keywords == ("calm", "breath")
        assert len(matcher) == 2
        assert "CALM" in matcher

    def test_find_reports_each_keyword_once(self) -> None:
        matcher = KeywordMatcher.of("demo", ["calm", "breath"])

        assert matcher.find("Calm breath, calm breath") == ["calm", "breath"]
        assert matcher.count("calm calm calm") == 1

    def test_substring_limitation_is_preserved(self) -> None:
        """Keywords match inside longer words."""
        matcher = KeywordMatcher.of("demo", ["present"])

        assert matcher.matches_any("I represent my team")

    def test_no_match(self) -> None:
        matcher = KeywordMatcher.of("demo", ["calm"])

        assert matcher.find("storm") == []
        assert not matcher.matches_any("")
