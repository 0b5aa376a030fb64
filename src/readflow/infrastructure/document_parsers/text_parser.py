"""Extractors for HTML, Markdown and generic text (including MOBI/AZW3 read as text)."""

from readflow.infrastructure.document_parsers.markup import (
    collapse_whitespace,
    decode_text,
    remove_control_characters,
    strip_html,
    strip_markdown,
)


def parse_text(data: bytes, encodings: tuple[str, ...] = ()) -> str:
    """Generic text: decode, drop control characters, collapse whitespace."""
    text = decode_text(data, encodings)
    return collapse_whitespace(remove_control_characters(text))


def parse_html(data: bytes, encodings: tuple[str, ...] = ()) -> str:
    """HTML / XHTML."""
    return strip_html(decode_text(data, encodings))


def parse_md(data: bytes, encodings: tuple[str, ...] = ()) -> str:
    """Markdown."""
    return strip_markdown(decode_text(data, encodings))
