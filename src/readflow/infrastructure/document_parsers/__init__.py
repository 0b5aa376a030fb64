"""Document parsers: extract plain text from document files."""

from readflow.infrastructure.document_parsers.pdf_parser import PdfExtractor
from readflow.infrastructure.document_parsers.registry import (
    ExtractorRegistry,
    resolve_format,
    supported_extensions,
)

__all__ = [
    "ExtractorRegistry",
    "PdfExtractor",
    "resolve_format",
    "supported_extensions",
]
