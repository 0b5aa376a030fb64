"""Domain value objects."""

from readflow.domain.value_objects.analysis_task import AnalysisTask
from readflow.domain.value_objects.document_kind import DocumentKind
from readflow.domain.value_objects.progress_stage import ProgressStage

__all__ = [
    "AnalysisTask",
    "DocumentKind",
    "ProgressStage",
]
