"""Analysis result and the report handed to callers."""

from dataclasses import dataclass, field

from readflow.domain.entities.document_descriptor import DocumentDescriptor
from readflow.domain.entities.mind_map_node import MindMapNode
from readflow.domain.entities.outline_node import OutlineNode
from readflow.domain.value_objects import AnalysisTask


@dataclass
class AnalysisResult:
    """Summary, key points, outline and mind map of one document."""

    summary: str
    key_points: list[str]
    outline: list[OutlineNode]
    mind_map: MindMapNode

    def to_dict(self) -> dict:
        """Record consumed by export renderers."""
        return {
            "summary": self.summary,
            "keyPoints": list(self.key_points),
            "outline": [n.to_dict() for n in self.outline],
            "mindMapData": self.mind_map.to_dict(),
        }


@dataclass
class AnalysisReport:
    """Analysis result plus provenance: degraded input and failed tasks."""

    descriptor: DocumentDescriptor
    result: AnalysisResult
    degraded: bool = False
    ocr_used: bool = False
    failures: dict[AnalysisTask, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict:
        return {
            "document": self.descriptor.to_dict(),
            "result": self.result.to_dict(),
            "degraded": self.degraded,
            "ocrUsed": self.ocr_used,
            "failures": {task.value: reason for task, reason in self.failures.items()},
        }
