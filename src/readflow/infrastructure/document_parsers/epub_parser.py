"""Parser for .epub (e-book)."""

import io
import logging

import ebooklib
from ebooklib import epub

from readflow.domain.exceptions import ExtractionFailed
from readflow.infrastructure.document_parsers.markup import strip_html

logger = logging.getLogger(__name__)


def parse_epub(data: bytes) -> str:
    """Extract text from every markup document in the archive, in archive order."""
    try:
        book = epub.read_epub(io.BytesIO(data))
    except Exception as e:
        raise ExtractionFailed(f"Invalid or corrupted epub file: {e}") from e
    parts: list[str] = []
    for item in book.get_items():
        if item.get_type() != ebooklib.ITEM_DOCUMENT:
            continue
        try:
            html = item.get_content().decode("utf-8", errors="replace")
        except Exception as e:
            logger.warning("Skipping unreadable epub item %s: %s", item.get_name(), e)
            continue
        text = strip_html(html)
        if text:
            parts.append(text)
    return "\n\n".join(parts)
