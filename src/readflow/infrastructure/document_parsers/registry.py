"""Registry: resolve document kind by MIME/extension and select the extractor for it."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from readflow.application.dto.extraction_config import ExtractionConfig
from readflow.application.ports import DocumentExtractor, OCREngine, PageRenderer, ProgressSink
from readflow.domain.entities import DocumentDescriptor, ExtractionResult
from readflow.domain.exceptions import FileTooLarge, UnsupportedFormat
from readflow.domain.value_objects import DocumentKind
from readflow.infrastructure.document_parsers.docx_parser import parse_docx
from readflow.infrastructure.document_parsers.epub_parser import parse_epub
from readflow.infrastructure.document_parsers.pdf_parser import PdfExtractor
from readflow.infrastructure.document_parsers.synthetic import build_empty_document_notice
from readflow.infrastructure.document_parsers.text_parser import parse_html, parse_md, parse_text

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE_BYTES = 50 * 1024 * 1024

# extension (lower) -> kind
_KIND_BY_EXT: dict[str, DocumentKind] = {
    "pdf": DocumentKind.PDF,
    "epub": DocumentKind.EPUB,
    "mobi": DocumentKind.MOBI,
    "azw3": DocumentKind.AZW3,
    "docx": DocumentKind.DOCX,
    "md": DocumentKind.MARKDOWN,
    "markdown": DocumentKind.MARKDOWN,
    "html": DocumentKind.HTML,
    "htm": DocumentKind.HTML,
    "xhtml": DocumentKind.HTML,
    "txt": DocumentKind.TEXT,
}

# MIME -> kind; takes priority over the extension
_KIND_BY_MIME: dict[str, DocumentKind] = {
    "application/pdf": DocumentKind.PDF,
    "application/epub+zip": DocumentKind.EPUB,
    "application/x-mobipocket-ebook": DocumentKind.MOBI,
    "application/vnd.amazon.ebook": DocumentKind.AZW3,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": DocumentKind.DOCX,
    "text/markdown": DocumentKind.MARKDOWN,
    "text/x-markdown": DocumentKind.MARKDOWN,
    "text/html": DocumentKind.HTML,
    "application/xhtml+xml": DocumentKind.HTML,
    "text/plain": DocumentKind.TEXT,
}


def kind_for_content_type(content_type: str | None) -> DocumentKind | None:
    """Return kind for MIME type (parameters ignored) or None."""
    if not content_type:
        return None
    mime = content_type.split(";")[0].strip().lower()
    return _KIND_BY_MIME.get(mime)


def kind_for_filename(filename: str | None) -> DocumentKind | None:
    """Return kind for filename (by extension) or None."""
    if not filename:
        return None
    ext = Path(filename).suffix.lstrip(".").lower()
    return _KIND_BY_EXT.get(ext)


def resolve_format(
    filename: str | None,
    content_type: str | None,
    size_bytes: int,
    max_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES,
) -> DocumentDescriptor:
    """
    Resolve the document kind and validate the size.
    Raises UnsupportedFormat or FileTooLarge.
    """
    kind = kind_for_content_type(content_type) or kind_for_filename(filename)
    if kind is None:
        ext = Path(filename).suffix if filename else ""
        raise UnsupportedFormat(
            f"Unsupported file type: {ext or content_type or 'unknown'}"
        )
    if size_bytes > max_bytes:
        raise FileTooLarge(size_bytes, max_bytes)
    return DocumentDescriptor(name=filename or "document", size_bytes=size_bytes, kind=kind)


def supported_extensions() -> list[str]:
    """Return list of supported file extensions (e.g. for frontend accept attribute)."""
    return sorted(_KIND_BY_EXT.keys())


class SyncParserExtractor:
    """Runs a blocking bytes -> text parser in a worker thread.

    Parsers that decode raw bytes get the fallback ``encodings`` as a second
    argument; binary container parsers (docx, epub) are called with the bytes only.
    """

    def __init__(
        self,
        parse: Callable[..., str],
        encodings: tuple[str, ...] | None = None,
    ) -> None:
        self._parse = parse
        self._encodings = encodings

    def _run(self, data: bytes) -> str:
        if self._encodings is None:
            return self._parse(data)
        return self._parse(data, self._encodings)

    async def extract(
        self,
        data: bytes,
        descriptor: DocumentDescriptor,
        on_progress: ProgressSink | None = None,
    ) -> ExtractionResult:
        text = await asyncio.to_thread(self._run, data)
        if not text.strip():
            logger.warning("No text extracted from %s, using notice", descriptor.name)
            return ExtractionResult(
                text=build_empty_document_notice(descriptor),
                kind=descriptor.kind,
                degraded=True,
            )
        return ExtractionResult(text=text, kind=descriptor.kind)


class ExtractorRegistry:
    """Extractor table keyed by DocumentKind."""

    def __init__(self, extractors: dict[DocumentKind, DocumentExtractor]) -> None:
        missing = set(DocumentKind) - set(extractors)
        if missing:
            raise ValueError(f"No extractor registered for: {sorted(k.value for k in missing)}")
        self._extractors = dict(extractors)

    def resolve(
        self,
        filename: str | None,
        content_type: str | None,
        size_bytes: int,
        max_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES,
    ) -> DocumentDescriptor:
        return resolve_format(filename, content_type, size_bytes, max_bytes)

    def get(self, kind: DocumentKind) -> DocumentExtractor:
        return self._extractors[kind]

    @classmethod
    def default(
        cls,
        config: ExtractionConfig | None = None,
        renderer: PageRenderer | None = None,
        ocr_engine: OCREngine | None = None,
    ) -> "ExtractorRegistry":
        config = config or ExtractionConfig()
        encodings = config.text_encodings
        text = SyncParserExtractor(parse_text, encodings)
        return cls(
            {
                DocumentKind.PDF: PdfExtractor(renderer, ocr_engine, config),
                DocumentKind.EPUB: SyncParserExtractor(parse_epub),
                DocumentKind.DOCX: SyncParserExtractor(parse_docx),
                DocumentKind.HTML: SyncParserExtractor(parse_html, encodings),
                DocumentKind.MARKDOWN: SyncParserExtractor(parse_md, encodings),
                DocumentKind.TEXT: text,
                DocumentKind.MOBI: text,
                DocumentKind.AZW3: text,
            }
        )
