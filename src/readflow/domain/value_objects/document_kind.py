"""Supported document kinds."""

from enum import StrEnum


class DocumentKind(StrEnum):
    """Closed set of document kinds the extractors understand."""

    PDF = "pdf"
    EPUB = "epub"
    MOBI = "mobi"
    AZW3 = "azw3"
    DOCX = "docx"
    MARKDOWN = "md"
    HTML = "html"
    TEXT = "txt"
