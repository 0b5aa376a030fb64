"""Extraction result - plain text pulled out of a document."""

from dataclasses import dataclass

from readflow.domain.value_objects import DocumentKind

# Prefix of synthetic bodies produced when no real text could be extracted.
DEGRADED_CONTENT_MARKER = "[readflow:degraded-content]"


@dataclass
class ExtractionResult:
    """Extracted text with its originating document kind."""

    text: str
    kind: DocumentKind
    degraded: bool = False
    ocr_used: bool = False
    page_count: int | None = None
