"""Chunk entity - bounded slice of extracted text."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Chunk:
    """Ordered, contiguous slice of a document's text."""

    index: int
    total_chunks: int
    text: str
