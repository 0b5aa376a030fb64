"""Extract text use case."""

import logging

from readflow.application.dto.extraction_config import ExtractionConfig
from readflow.application.ports import ExtractorLookup, ProgressSink, emit_progress
from readflow.domain.entities import DocumentDescriptor, ExtractionResult, ParseProgressEvent
from readflow.domain.value_objects import ProgressStage

logger = logging.getLogger(__name__)


class ExtractTextUseCase:
    """Resolve the document kind, run its extractor, report completion."""

    def __init__(self, extractors: ExtractorLookup, config: ExtractionConfig | None = None) -> None:
        self._extractors = extractors
        self._config = config or ExtractionConfig()

    @property
    def max_file_size_bytes(self) -> int:
        return self._config.max_file_size_bytes

    def describe(
        self,
        filename: str | None,
        content_type: str | None,
        size_bytes: int,
    ) -> DocumentDescriptor:
        """Validate the upload before any bytes are parsed."""
        return self._extractors.resolve(
            filename, content_type, size_bytes, self._config.max_file_size_bytes
        )

    async def execute(
        self,
        data: bytes,
        filename: str | None,
        content_type: str | None = None,
        on_progress: ProgressSink | None = None,
    ) -> tuple[DocumentDescriptor, ExtractionResult]:
        """Extract text. Raises UnsupportedFormat, FileTooLarge or ExtractionFailed."""
        descriptor = self.describe(filename, content_type, len(data))
        logger.info(
            "Extracting %s (%s, %d bytes)", descriptor.name, descriptor.kind, descriptor.size_bytes
        )
        extractor = self._extractors.get(descriptor.kind)
        result = await extractor.extract(data, descriptor, on_progress)
        emit_progress(
            on_progress,
            ParseProgressEvent(
                stage=ProgressStage.DONE,
                percent=100,
                message="Text extraction finished",
                total_pages=result.page_count,
            ),
        )
        if result.degraded:
            logger.warning("Extraction of %s produced degraded content", descriptor.name)
        return descriptor, result
