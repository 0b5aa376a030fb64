"""Domain entities."""

from readflow.domain.entities.analysis_result import AnalysisReport, AnalysisResult
from readflow.domain.entities.chunk import Chunk
from readflow.domain.entities.document_descriptor import DocumentDescriptor
from readflow.domain.entities.extraction_result import (
    DEGRADED_CONTENT_MARKER,
    ExtractionResult,
)
from readflow.domain.entities.mind_map_node import MindMapNode
from readflow.domain.entities.outline_node import OutlineNode
from readflow.domain.entities.progress_event import ParseProgressEvent

__all__ = [
    "DEGRADED_CONTENT_MARKER",
    "AnalysisReport",
    "AnalysisResult",
    "Chunk",
    "DocumentDescriptor",
    "ExtractionResult",
    "MindMapNode",
    "OutlineNode",
    "ParseProgressEvent",
]
