"""Tests for core data models."""

from __future__ import annotations

import dataclasses

import pytest

from docsearch.models import ExtractedText, IndexedDocument, SearchIndex


class TestIndexedDocument:
    """Test IndexedDocument dataclass."""

    def test_create_document(self) -> None:
        """Should create IndexedDocument with all fields."""
        doc = IndexedDocument(
            path="std/vec/struct.Vec.html",
            title="Vec",
            description="A contiguous growable array type.",
            term_frequencies={"vec": 0.5, "array": 0.5},
        )

        assert doc.path == "std/vec/struct.Vec.html"
        assert doc.title == "Vec"
        assert doc.term_frequencies == {"vec": 0.5, "array": 0.5}

    def test_document_is_frozen(self) -> None:
        """Should reject attribute assignment."""
        doc = IndexedDocument(path="a.html", title="A", description="")

        with pytest.raises(dataclasses.FrozenInstanceError):
            doc.title = "B"  # type: ignore[misc]

    def test_document_equality(self) -> None:
        """Should compare documents by value."""
        first = IndexedDocument(path="a.html", title="A", description="d", term_frequencies={"aaa": 1.0})
        second = IndexedDocument(path="a.html", title="A", description="d", term_frequencies={"aaa": 1.0})

        assert first == second


class TestSearchIndex:
    """Test SearchIndex dataclass."""

    def test_defaults_are_empty(self) -> None:
        index = SearchIndex(fingerprint="abc")

        assert index.documents == ()
        assert index.idf == {}
        assert len(index) == 0

    def test_len_counts_documents(self) -> None:
        docs = (
            IndexedDocument(path="a.html", title="A", description=""),
            IndexedDocument(path="b.html", title="B", description=""),
        )
        assert len(SearchIndex(fingerprint="abc", documents=docs)) == 2


class TestExtractedText:
    """Test ExtractedText dataclass."""

    def test_fields(self) -> None:
        extracted = ExtractedText(title="T", description="D", text="T D")

        assert (extracted.title, extracted.description, extracted.text) == ("T", "D", "T D")
