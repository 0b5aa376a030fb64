"""Application ports - interfaces for external adapters."""

from readflow.application.ports.chunker import Chunker
from readflow.application.ports.completion_gateway import CompletionGateway
from readflow.application.ports.extractor import DocumentExtractor, ExtractorLookup
from readflow.application.ports.ocr import OCREngine, PageRenderer
from readflow.application.ports.progress import ProgressSink, emit_progress

__all__ = [
    "Chunker",
    "CompletionGateway",
    "DocumentExtractor",
    "ExtractorLookup",
    "OCREngine",
    "PageRenderer",
    "ProgressSink",
    "emit_progress",
]
