"""Assemble analysis result use case."""

import asyncio
import logging

from readflow.application.analysis.fallbacks import build_fallback_mind_map, build_fallback_outline
from readflow.application.analysis.orchestrator import AIOrchestrator
from readflow.application.dto.analysis_config import AnalysisConfig
from readflow.application.ports import ProgressSink
from readflow.application.use_cases.extraction.extract_text import ExtractTextUseCase
from readflow.domain.entities import (
    AnalysisReport,
    AnalysisResult,
    DocumentDescriptor,
    MindMapNode,
    OutlineNode,
)
from readflow.domain.exceptions import AITaskFailed, JSONRepairExhausted, Timeout
from readflow.domain.value_objects import AnalysisTask

logger = logging.getLogger(__name__)

# task -> failure reason; None when the task succeeded
_Failure = tuple[AnalysisTask, str] | None


class ResultAssembler:
    """Extract, analyze and compose a structurally valid report.

    Summary and mind map run in sequence; key points and outline run
    concurrently with that branch. A failed task gets fallback content and
    an entry in ``AnalysisReport.failures``.
    """

    def __init__(
        self,
        extract_text: ExtractTextUseCase,
        orchestrator: AIOrchestrator,
        config: AnalysisConfig | None = None,
    ) -> None:
        self._extract_text = extract_text
        self._orchestrator = orchestrator
        self._config = config or AnalysisConfig()

    @property
    def max_file_size_bytes(self) -> int:
        """Upload ceiling enforced by extraction."""
        return self._extract_text.max_file_size_bytes

    def describe(
        self,
        filename: str | None,
        content_type: str | None,
        size_bytes: int,
    ) -> DocumentDescriptor:
        """Validate an upload up front. Raises UnsupportedFormat or FileTooLarge."""
        return self._extract_text.describe(filename, content_type, size_bytes)

    async def execute(
        self,
        data: bytes,
        filename: str | None,
        content_type: str | None = None,
        on_progress: ProgressSink | None = None,
    ) -> AnalysisReport:
        """Analyze a document. Raises UnsupportedFormat, FileTooLarge or ExtractionFailed."""
        descriptor, extraction = await self._extract_text.execute(
            data, filename, content_type, on_progress
        )
        return await self.analyze(
            extraction.text,
            descriptor,
            degraded=extraction.degraded,
            ocr_used=extraction.ocr_used,
        )

    async def analyze(
        self,
        text: str,
        descriptor: DocumentDescriptor,
        degraded: bool = False,
        ocr_used: bool = False,
    ) -> AnalysisReport:
        """Run all analysis tasks on already extracted text."""
        (key_points, kp_failure), (outline, outline_failure), branch = await asyncio.gather(
            self._key_points(text),
            self._outline(text),
            self._summary_and_mind_map(text),
        )
        summary, mind_map, branch_failures = branch

        failures: dict[AnalysisTask, str] = {}
        for failure in (kp_failure, outline_failure, *branch_failures):
            if failure is not None:
                task, reason = failure
                failures[task] = reason
        if failures:
            logger.warning(
                "Analysis of %s finished with fallbacks for: %s",
                descriptor.name, ", ".join(t.value for t in failures),
            )
        else:
            logger.info("Analysis of %s finished", descriptor.name)

        return AnalysisReport(
            descriptor=descriptor,
            result=AnalysisResult(
                summary=summary,
                key_points=key_points,
                outline=outline,
                mind_map=mind_map,
            ),
            degraded=degraded,
            ocr_used=ocr_used,
            failures=failures,
        )

    async def _key_points(self, text: str) -> tuple[list[str], _Failure]:
        try:
            return await self._orchestrator.extract_key_points(text), None
        except AITaskFailed as e:
            logger.error("Key points failed: %s", e)
            return [], (AnalysisTask.KEY_POINTS, str(e))

    async def _outline(self, text: str) -> tuple[list[OutlineNode], _Failure]:
        try:
            return await self._orchestrator.generate_outline(text), None
        except (AITaskFailed, JSONRepairExhausted) as e:
            logger.error("Outline failed, using fallback: %s", e)
            fallback = build_fallback_outline(text, self._config.fallback_outline_lines)
            return fallback, (AnalysisTask.OUTLINE, str(e))

    async def _summary_and_mind_map(
        self, text: str
    ) -> tuple[str, MindMapNode, list[_Failure]]:
        try:
            summary = await self._orchestrator.summarize(text)
        except AITaskFailed as e:
            logger.error("Summary failed, mind map falls back to raw text: %s", e)
            reason = str(e)
            return (
                "",
                build_fallback_mind_map(text),
                [(AnalysisTask.SUMMARY, reason), (AnalysisTask.MIND_MAP, f"summary unavailable: {reason}")],
            )

        timeout = self._config.mind_map_timeout
        try:
            mind_map = await asyncio.wait_for(
                self._orchestrator.generate_mind_map(summary), timeout=timeout
            )
        except TimeoutError:
            reason = str(Timeout("mind map generation", timeout))
            logger.error("Mind map watchdog fired: %s", reason)
            return summary, build_fallback_mind_map(text), [(AnalysisTask.MIND_MAP, reason)]
        except (AITaskFailed, JSONRepairExhausted) as e:
            logger.error("Mind map failed, using fallback: %s", e)
            return summary, build_fallback_mind_map(text), [(AnalysisTask.MIND_MAP, str(e))]
        return summary, mind_map, []
