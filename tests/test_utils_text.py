"""Tests for text utility functions."""

from __future__ import annotations

import pytest

from docsearch.utils.text import (
    MIN_TERM_LENGTH,
    collapse_whitespace,
    tokenize,
    truncate,
)


class TestTokenize:
    """Test tokenize function."""

    def test_lowercases_and_splits(self) -> None:
        """Should lower-case and split on non-alphanumerics."""
        assert tokenize("Vec::with_capacity(Size)") == ["vec", "with", "capacity", "size"]

    def test_discards_short_tokens(self) -> None:
        """Should drop tokens shorter than three characters."""
        assert tokenize("a an the of into") == ["the", "into"]

    def test_keeps_duplicates_in_order(self) -> None:
        """Should preserve duplicates and order."""
        assert tokenize("push pop push") == ["push", "pop", "push"]

    def test_digits_are_alphanumeric(self) -> None:
        """Should keep digits as part of terms."""
        assert tokenize("u128 i64 f32x4") == ["u128", "i64", "f32x4"]

    def test_unicode_letters(self) -> None:
        """Should treat non-ASCII letters as term characters."""
        assert tokenize("Größe café") == ["größe", "café"]

    def test_empty_text(self) -> None:
        """Should return an empty list for empty or separator-only text."""
        assert tokenize("") == []
        assert tokenize("  --- ,,, ") == []

    def test_custom_min_length(self) -> None:
        """Should respect a custom minimum length."""
        assert tokenize("go is fun", min_length=2) == ["go", "is", "fun"]

    def test_default_min_length(self) -> None:
        assert MIN_TERM_LENGTH == 3


class TestCollapseWhitespace:
    """Test collapse_whitespace function."""

    def test_collapses_runs(self) -> None:
        assert collapse_whitespace("  one\n\ttwo   three ") == "one two three"


class TestTruncate:
    """Test truncate function."""

    def test_short_text_unchanged(self) -> None:
        assert truncate("short", 200) == "short"

    def test_exact_length_unchanged(self) -> None:
        text = "x" * 200
        assert truncate(text, 200) == text

    @pytest.mark.parametrize("length", [201, 500])
    def test_long_text_gets_ellipsis(self, length: int) -> None:
        """Should cut to the limit and append an ellipsis."""
        result = truncate("y" * length, 200)
        assert result == "y" * 200 + "..."
