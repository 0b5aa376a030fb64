"""Parser for PDF: layered in-document extraction, then OCR, then a synthetic description."""

import asyncio
import io
import logging
from collections.abc import Callable

from pypdf import PageObject, PdfReader

from readflow.application.dto.extraction_config import ExtractionConfig
from readflow.application.ports import OCREngine, PageRenderer, ProgressSink, emit_progress
from readflow.domain.entities import DocumentDescriptor, ExtractionResult, ParseProgressEvent
from readflow.domain.exceptions import ExtractionFailed
from readflow.domain.value_objects import DocumentKind, ProgressStage
from readflow.infrastructure.document_parsers.synthetic import build_pdf_fallback_description

logger = logging.getLogger(__name__)

# Text-showing operators in a content stream.
_SHOW_TEXT = b"Tj"
_SHOW_TEXT_ARRAY = b"TJ"
_NEXT_LINE_SHOW = b"'"
_SPACING_NEXT_LINE_SHOW = b'"'


def _open_reader(data: bytes) -> PdfReader:
    reader = PdfReader(io.BytesIO(data))
    # Touch the page tree so broken files fail here rather than mid-loop.
    len(reader.pages)
    return reader


def _decode_pdf_string(value: object) -> str:
    if isinstance(value, str):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("latin-1", errors="replace")
    return ""


def _structured_text(page: PageObject) -> str:
    return page.extract_text() or ""


def _layout_text(page: PageObject) -> str:
    return page.extract_text(extraction_mode="layout", layout_mode_space_vertically=False) or ""


def _content_stream_text(page: PageObject) -> str:
    """Scan the raw content stream for text-showing operators."""
    contents = page.get_contents()
    if contents is None:
        return ""
    fragments: list[str] = []
    for operands, operator in contents.operations:
        if not operands:
            continue
        if operator in (_SHOW_TEXT, _NEXT_LINE_SHOW):
            fragments.append(_decode_pdf_string(operands[0]))
        elif operator == _SPACING_NEXT_LINE_SHOW and len(operands) >= 3:
            fragments.append(_decode_pdf_string(operands[2]))
        elif operator == _SHOW_TEXT_ARRAY and isinstance(operands[0], list):
            fragments.extend(_decode_pdf_string(item) for item in operands[0])
    return " ".join(f.strip() for f in fragments if f.strip())


_PAGE_METHODS: tuple[tuple[str, Callable[[PageObject], str]], ...] = (
    ("structured", _structured_text),
    ("layout", _layout_text),
    ("content-stream", _content_stream_text),
)


def extract_page_text(reader: PdfReader, page_index: int) -> str:
    """Try each extraction method in order; the first one yielding text wins."""
    page = reader.pages[page_index]
    for name, method in _PAGE_METHODS:
        try:
            text = method(page)
        except Exception as e:
            logger.warning("Page %d: %s extraction failed: %s", page_index + 1, name, e)
            continue
        if text.strip():
            if name != "structured":
                logger.debug("Page %d: text recovered by %s extraction", page_index + 1, name)
            return text.strip()
    return ""


def outline_titles(reader: PdfReader) -> list[str]:
    """Flatten the bookmark tree into a list of titles."""
    try:
        outline = reader.outline
    except Exception as e:
        logger.warning("Could not read PDF outline: %s", e)
        return []
    titles: list[str] = []

    def _walk(items: list) -> None:
        for item in items:
            if isinstance(item, list):
                _walk(item)
                continue
            title = getattr(item, "title", None)
            if title:
                titles.append(str(title))

    _walk(outline)
    return titles


def parsing_percent(page_number: int, total_pages: int) -> int:
    return min(5 + (page_number * 45) // max(total_pages, 1), 50)


def ocr_percent(page_number: int, total_pages: int) -> int:
    return 50 + (page_number * 40) // max(total_pages, 1)


class PdfExtractor:
    """PDF extractor with page-image OCR fallback for scanned documents."""

    def __init__(
        self,
        renderer: PageRenderer | None = None,
        ocr_engine: OCREngine | None = None,
        config: ExtractionConfig | None = None,
    ) -> None:
        self._renderer = renderer
        self._ocr_engine = ocr_engine
        self._config = config or ExtractionConfig()

    async def extract(
        self,
        data: bytes,
        descriptor: DocumentDescriptor,
        on_progress: ProgressSink | None = None,
    ) -> ExtractionResult:
        """Extract text from PDF bytes, degrading to OCR and then to a synthetic description."""
        try:
            reader = await asyncio.to_thread(_open_reader, data)
        except Exception as e:
            raise ExtractionFailed(f"Invalid or corrupted PDF: {e}") from e
        total = len(reader.pages)
        logger.info("PDF %s loaded, %d pages", descriptor.name, total)
        emit_progress(
            on_progress,
            ParseProgressEvent(
                stage=ProgressStage.LOADING,
                percent=5,
                message="PDF loaded",
                total_pages=total,
            ),
        )

        parts: list[str] = []
        for index in range(total):
            page_number = index + 1
            emit_progress(
                on_progress,
                ParseProgressEvent(
                    stage=ProgressStage.PARSING,
                    percent=parsing_percent(page_number, total),
                    message=f"Parsing page {page_number}/{total}",
                    page_index=page_number,
                    total_pages=total,
                ),
            )
            try:
                page_text = await asyncio.wait_for(
                    asyncio.to_thread(extract_page_text, reader, index),
                    timeout=self._config.pdf_page_timeout,
                )
            except TimeoutError:
                logger.warning(
                    "Page %d of %s exceeded %.0fs, skipping",
                    page_number, descriptor.name, self._config.pdf_page_timeout,
                )
                # The abandoned thread still owns the old reader.
                reader = await asyncio.to_thread(_open_reader, data)
                page_text = ""
            except Exception as e:
                logger.warning("Page %d of %s could not be read: %s", page_number, descriptor.name, e)
                page_text = ""
            if page_text:
                parts.append(page_text)
            await asyncio.sleep(0)

        text = "\n\n".join(parts)
        if len(text) >= self._config.pdf_min_text_chars:
            logger.info("PDF %s: extracted %d characters", descriptor.name, len(text))
            return ExtractionResult(text=text, kind=DocumentKind.PDF, page_count=total)

        logger.warning(
            "PDF %s yielded %d characters, treating as scanned and running OCR",
            descriptor.name, len(text),
        )
        ocr_text = await self._ocr_pages(data, total, descriptor.name, on_progress)
        if len(ocr_text) >= self._config.ocr_min_text_chars:
            logger.info("OCR recovered %d characters from %s", len(ocr_text), descriptor.name)
            emit_progress(
                on_progress,
                ParseProgressEvent(
                    stage=ProgressStage.DONE,
                    percent=95,
                    message="OCR finished, preparing analysis",
                    total_pages=total,
                ),
            )
            return ExtractionResult(
                text=ocr_text, kind=DocumentKind.PDF, ocr_used=True, page_count=total
            )

        logger.warning(
            "OCR yielded %d characters for %s, using synthetic description",
            len(ocr_text), descriptor.name,
        )
        titles = await asyncio.to_thread(outline_titles, reader)
        return ExtractionResult(
            text=build_pdf_fallback_description(descriptor.name, total, titles),
            kind=DocumentKind.PDF,
            degraded=True,
            page_count=total,
        )

    async def _ocr_pages(
        self,
        data: bytes,
        total: int,
        file_name: str,
        on_progress: ProgressSink | None,
    ) -> str:
        """Render and recognize every page, strictly one after another."""
        if self._renderer is None or self._ocr_engine is None:
            logger.warning("OCR is not configured, skipping OCR for %s", file_name)
            return ""
        try:
            total = await self._renderer.page_count(data) or total
        except Exception as e:
            logger.warning("Renderer could not count pages of %s: %s", file_name, e)
        emit_progress(
            on_progress,
            ParseProgressEvent(
                stage=ProgressStage.OCR,
                percent=50,
                message="Scanned document detected, running OCR on all pages",
                total_pages=total,
            ),
        )
        collected: list[str] = []
        for index in range(total):
            page_number = index + 1
            try:
                page_text = await asyncio.wait_for(
                    self._ocr_page(data, index),
                    timeout=self._config.ocr_page_timeout,
                )
            except TimeoutError:
                logger.warning(
                    "OCR of page %d/%d exceeded %.0fs, skipping",
                    page_number, total, self._config.ocr_page_timeout,
                )
                page_text = ""
            except Exception:
                logger.error("OCR failed for page %d/%d of %s", page_number, total, file_name, exc_info=True)
                page_text = ""
            if page_text.strip():
                collected.append(page_text.strip())
            emit_progress(
                on_progress,
                ParseProgressEvent(
                    stage=ProgressStage.OCR,
                    percent=ocr_percent(page_number, total),
                    message=f"OCR page {page_number}/{total}",
                    page_index=page_number,
                    total_pages=total,
                ),
            )
        return "\n\n".join(collected)

    async def _ocr_page(self, data: bytes, index: int) -> str:
        image = await self._renderer.render(data, index)
        return await self._ocr_engine.recognize(image, self._config.ocr_language)
