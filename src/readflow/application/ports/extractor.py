"""Document extraction ports."""

from typing import Protocol

from readflow.application.ports.progress import ProgressSink
from readflow.domain.entities import DocumentDescriptor, ExtractionResult
from readflow.domain.value_objects import DocumentKind


class DocumentExtractor(Protocol):
    """Extractor that pulls plain text out of document bytes."""

    async def extract(
        self,
        data: bytes,
        descriptor: DocumentDescriptor,
        on_progress: ProgressSink | None = None,
    ) -> ExtractionResult:
        """Extract text. Raises ExtractionFailed when the bytes cannot be read."""
        ...


class ExtractorLookup(Protocol):
    """Port for format resolution and extractor selection."""

    def resolve(
        self,
        filename: str | None,
        content_type: str | None,
        size_bytes: int,
        max_bytes: int,
    ) -> DocumentDescriptor: ...

    def get(self, kind: DocumentKind) -> DocumentExtractor: ...
