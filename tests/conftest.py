"""Pytest fixtures for ReadFlow tests."""

from __future__ import annotations

import asyncio
import io
from collections.abc import Callable

import pytest

from readflow.application.analysis.orchestrator import AIOrchestrator
from readflow.application.dto.analysis_config import AnalysisConfig
from readflow.application.dto.completion import CompletionRequest, CompletionResponse
from readflow.application.dto.extraction_config import ExtractionConfig
from readflow.application.use_cases.analysis.assemble_result import ResultAssembler
from readflow.application.use_cases.extraction.extract_text import ExtractTextUseCase
from readflow.domain.entities import ParseProgressEvent
from readflow.domain.value_objects import AnalysisTask
from readflow.infrastructure.chunking.paragraph_chunker import ParagraphChunker
from readflow.infrastructure.document_parsers import ExtractorRegistry

OUTLINE_JSON = (
    '[{"id": "1", "title": "Introduction", "level": 1, "content": "Why it matters"},'
    ' {"id": "2", "title": "Method", "level": 1, "children":'
    ' [{"id": "2.1", "title": "Data collection", "level": 2}]}]'
)
MIND_MAP_JSON = (
    '{"id": "root", "label": "Reading", "children": ['
    '{"id": "b1", "label": "Introduction", "children": [{"id": "b1_1", "label": "Context"}]},'
    '{"id": "b2", "label": "Findings", "children": [{"id": "b2_1", "label": "Result A"}]}]}'
)
KEY_POINTS_TEXT = (
    "Here are the key points:\n"
    "💡 Reading daily builds lasting comprehension - apply it every morning\n"
    "💡 Summaries help memory retention - write one after each chapter\n"
    "short\n"
)


# --- Fake completion gateway ---


Responder = Callable[[CompletionRequest], CompletionResponse]


class ScriptedGateway:
    """Completion gateway answering per task; records every request."""

    def __init__(
        self,
        responses: dict[AnalysisTask, CompletionResponse | list[CompletionResponse] | Responder]
        | None = None,
        delay: float = 0.0,
    ) -> None:
        self._responses = responses or {}
        self._delay = delay
        self.requests: list[CompletionRequest] = []

    def requests_for(self, task: AnalysisTask) -> list[CompletionRequest]:
        return [r for r in self.requests if r.task_type == task]

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request)
        if self._delay:
            await asyncio.sleep(self._delay)
        scripted = self._responses.get(request.task_type)
        if scripted is None:
            return CompletionResponse.ok(default_response(request.task_type))
        if isinstance(scripted, list):
            return scripted.pop(0) if len(scripted) > 1 else scripted[0]
        if callable(scripted):
            return scripted(request)
        return scripted


def default_response(task: AnalysisTask) -> str:
    return {
        AnalysisTask.SUMMARY: "A structured summary of the document.",
        AnalysisTask.KEY_POINTS: KEY_POINTS_TEXT,
        AnalysisTask.OUTLINE: OUTLINE_JSON,
        AnalysisTask.MIND_MAP: MIND_MAP_JSON,
    }[task]


# --- Fake OCR ---


class FakePageRenderer:
    """Renders every page to a tiny placeholder PNG signature."""

    def __init__(self, pages: int | None = None) -> None:
        self._pages = pages
        self.rendered: list[int] = []

    async def page_count(self, data: bytes) -> int:
        if self._pages is None:
            raise RuntimeError("page count unavailable")
        return self._pages

    async def render(self, data: bytes, page_index: int) -> bytes:
        self.rendered.append(page_index)
        return b"\x89PNG\r\n\x1a\n" + str(page_index).encode()


class FakeOCREngine:
    """Returns a fixed text per page and tracks concurrent calls."""

    def __init__(self, text_per_page: str = "Recognized scanned page text. " * 3) -> None:
        self._text = text_per_page
        self.calls: list[tuple[bytes, str]] = []
        self.active = 0
        self.max_active = 0

    async def recognize(self, image: bytes, language: str) -> str:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(0)
            self.calls.append((image, language))
            return self._text
        finally:
            self.active -= 1


class ProgressRecorder:
    """Progress sink collecting events."""

    def __init__(self) -> None:
        self.events: list[ParseProgressEvent] = []

    def __call__(self, event: ParseProgressEvent) -> None:
        self.events.append(event)

    @property
    def percents(self) -> list[int]:
        return [e.percent for e in self.events]


# --- In-memory documents ---


def make_text_pdf(pages: list[str]) -> bytes:
    """PDF whose pages carry a real text layer (Helvetica, one line per page)."""
    from pypdf import PdfWriter
    from pypdf.generic import (
        DecodedStreamObject,
        DictionaryObject,
        NameObject,
    )

    writer = PdfWriter()
    font = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject("/Helvetica"),
        }
    )
    font_ref = writer._add_object(font)
    for text in pages:
        page = writer.add_blank_page(width=612, height=792)
        escaped = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        stream = DecodedStreamObject()
        stream.set_data(f"BT /F1 12 Tf 72 720 Td ({escaped}) Tj ET".encode("latin-1"))
        page[NameObject("/Contents")] = writer._add_object(stream)
        page[NameObject("/Resources")] = DictionaryObject(
            {NameObject("/Font"): DictionaryObject({NameObject("/F1"): font_ref})}
        )
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def make_blank_pdf(page_count: int, outline: list[str] | None = None) -> bytes:
    """Image-only stand-in: pages without any text layer."""
    from pypdf import PdfWriter

    writer = PdfWriter()
    for _ in range(page_count):
        writer.add_blank_page(width=72, height=72)
    for i, title in enumerate(outline or []):
        writer.add_outline_item(title, i % max(page_count, 1))
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def make_docx(paragraphs: list[str], table: list[list[str]] | None = None) -> bytes:
    from docx import Document as DocxDocument

    doc = DocxDocument()
    for p in paragraphs:
        doc.add_paragraph(p)
    if table:
        t = doc.add_table(rows=len(table), cols=len(table[0]))
        for r, row in enumerate(table):
            for c, value in enumerate(row):
                t.cell(r, c).text = value
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def make_epub(chapters: list[tuple[str, str]]) -> bytes:
    """EPUB with one XHTML item per (title, html body) pair, in order."""
    from ebooklib import epub

    book = epub.EpubBook()
    book.set_identifier("readflow-test")
    book.set_title("Test book")
    book.set_language("en")
    items = []
    for i, (title, body) in enumerate(chapters, start=1):
        item = epub.EpubHtml(title=title, file_name=f"chap_{i}.xhtml", lang="en")
        item.content = f"<html><body><h1>{title}</h1>{body}</body></html>"
        book.add_item(item)
        items.append(item)
    book.toc = items
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = items
    buf = io.BytesIO()
    epub.write_epub(buf, book, {})
    return buf.getvalue()


# --- Fixtures ---


@pytest.fixture
def analysis_config() -> AnalysisConfig:
    return AnalysisConfig()


@pytest.fixture
def extraction_config() -> ExtractionConfig:
    return ExtractionConfig()


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def recorder() -> ProgressRecorder:
    return ProgressRecorder()


@pytest.fixture
def orchestrator(gateway: ScriptedGateway, analysis_config: AnalysisConfig) -> AIOrchestrator:
    return AIOrchestrator(gateway, ParagraphChunker(), analysis_config)


@pytest.fixture
def assembler(
    orchestrator: AIOrchestrator,
    analysis_config: AnalysisConfig,
    extraction_config: ExtractionConfig,
) -> ResultAssembler:
    registry = ExtractorRegistry.default(
        extraction_config, renderer=FakePageRenderer(), ocr_engine=FakeOCREngine()
    )
    return ResultAssembler(
        extract_text=ExtractTextUseCase(registry, extraction_config),
        orchestrator=orchestrator,
        config=analysis_config,
    )
