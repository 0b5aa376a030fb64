"""Unit tests for ParagraphChunker."""

import pytest

from readflow.infrastructure.chunking.paragraph_chunker import ParagraphChunker


class TestParagraphChunker:
    """Tests for ParagraphChunker.split."""

    def test_short_text_single_chunk(self) -> None:
        chunks = ParagraphChunker().split("short text", 100)
        assert len(chunks) == 1
        assert chunks[0].index == 0
        assert chunks[0].total_chunks == 1
        assert chunks[0].text == "short text"

    def test_empty_text_single_empty_chunk(self) -> None:
        chunks = ParagraphChunker().split("", 100)
        assert [c.text for c in chunks] == [""]

    def test_fixed_windows_without_breaks(self) -> None:
        chunks = ParagraphChunker().split("a" * 15000, 6000)
        assert [len(c.text) for c in chunks] == [6000, 6000, 3000]
        assert [c.index for c in chunks] == [0, 1, 2]
        assert all(c.total_chunks == 3 for c in chunks)

    def test_concatenation_is_lossless(self) -> None:
        text = "\n".join(f"Paragraph {i} " + "word " * (i % 7 + 3) for i in range(300))
        chunks = ParagraphChunker().split(text, 500)
        assert "".join(c.text for c in chunks) == text
        assert all(len(c.text) <= 500 for c in chunks)

    def test_cuts_at_late_line_break(self) -> None:
        text = "x" * 80 + "\n" + "y" * 100
        chunks = ParagraphChunker(break_ratio=0.6).split(text, 100)
        assert chunks[0].text == "x" * 80
        assert chunks[1].text.startswith("\n")

    def test_ignores_early_line_break(self) -> None:
        text = "x" * 30 + "\n" + "y" * 150
        chunks = ParagraphChunker(break_ratio=0.6).split(text, 100)
        assert len(chunks[0].text) == 100

    def test_non_positive_max_len_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_len must be positive"):
            ParagraphChunker().split("text", 0)
