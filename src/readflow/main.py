"""Application entry point and composition root."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from readflow import __version__
from readflow.application.analysis.orchestrator import AIOrchestrator
from readflow.application.ports import CompletionGateway
from readflow.application.use_cases.analysis.assemble_result import ResultAssembler
from readflow.application.use_cases.extraction.extract_text import ExtractTextUseCase
from readflow.config import Settings, get_settings
from readflow.domain.entities import AnalysisReport, ParseProgressEvent
from readflow.domain.exceptions import ReadFlowError
from readflow.infrastructure.ai.http_gateway import HttpCompletionGateway
from readflow.infrastructure.ai.openai_gateway import OpenAICompletionGateway
from readflow.infrastructure.chunking.paragraph_chunker import ParagraphChunker
from readflow.infrastructure.document_parsers import ExtractorRegistry
from readflow.infrastructure.ocr.pymupdf_renderer import PyMuPDFPageRenderer
from readflow.infrastructure.ocr.tesseract_engine import TesseractOCREngine
from readflow.interfaces.api.app import create_app
from readflow.interfaces.api.resources.analyses import AnalysesResource, AnalysesStreamResource
from readflow.interfaces.api.resources.formats import FormatsResource
from readflow.interfaces.api.resources.health import HealthResource

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Stream handler on the root logger with the standard format."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def build_gateway(settings: Settings) -> CompletionGateway:
    if settings.ai_gateway_url:
        return HttpCompletionGateway(settings.ai_gateway_url, timeout=settings.ai_call_timeout)
    return OpenAICompletionGateway(
        base_url=settings.ai_api_url,
        api_key=settings.ai_api_key,
        model=settings.ai_model,
        temperature=settings.ai_temperature,
        top_p=settings.ai_top_p,
    )


def build_assembler(settings: Settings, gateway: CompletionGateway | None = None) -> ResultAssembler:
    """Wire extractors, OCR and the AI orchestrator."""
    extraction_config = settings.to_extraction_config()
    analysis_config = settings.to_analysis_config()
    registry = ExtractorRegistry.default(
        extraction_config,
        renderer=PyMuPDFPageRenderer(dpi=settings.ocr_dpi),
        ocr_engine=TesseractOCREngine(tesseract_cmd=settings.tesseract_cmd or None),
    )
    orchestrator = AIOrchestrator(
        gateway=gateway or build_gateway(settings),
        chunker=ParagraphChunker(analysis_config.chunk_break_ratio),
        config=analysis_config,
    )
    return ResultAssembler(
        extract_text=ExtractTextUseCase(registry, extraction_config),
        orchestrator=orchestrator,
        config=analysis_config,
    )


def create_readflow_app():
    """Composition root - build Falcon app with all dependencies."""
    settings = get_settings()
    configure_logging(settings.log_level)
    assembler = build_assembler(settings)
    return create_app(
        analyses_resource=AnalysesResource(assembler),
        analyses_stream_resource=AnalysesStreamResource(assembler),
        formats_resource=FormatsResource(settings.max_file_size_bytes),
        health_resource=HealthResource(
            ai_configured=bool(settings.ai_gateway_url or settings.ai_api_key),
            tesseract_cmd=settings.tesseract_cmd,
        ),
        cors_origins=settings.cors_origin_list(),
    )


def run_server(host: str | None = None, port: int | None = None) -> None:
    """Run uvicorn server."""
    import uvicorn

    settings = get_settings()
    app = create_readflow_app()
    uvicorn.run(app, host=host or settings.host, port=port or settings.port)


def _print_progress(event: ParseProgressEvent) -> None:
    print(f"[{event.percent:3d}%] {event.stage}: {event.message}", file=sys.stderr)


def _format_report(report: AnalysisReport) -> str:
    result = report.result
    lines = [f"# {report.descriptor.name} ({report.descriptor.kind})"]
    if report.degraded:
        lines.append("(degraded input: no readable text, analysis based on a synthetic description)")
    if report.ocr_used:
        lines.append("(text recovered by OCR)")
    lines += ["", "## Summary", result.summary or "(unavailable)", "", "## Key points"]
    lines += [f"- {p}" for p in result.key_points] or ["(none)"]
    lines += ["", "## Outline"]

    def _outline(nodes, depth=0):
        for n in nodes:
            lines.append(f"{'  ' * depth}- {n.title}")
            _outline(n.children, depth + 1)

    _outline(result.outline)
    if not report.succeeded:
        lines += ["", "## Fallbacks used"]
        lines += [f"- {task}: {reason}" for task, reason in report.failures.items()]
    return "\n".join(lines)


def _analyze(path: Path, as_json: bool, settings: Settings) -> int:
    try:
        data = path.read_bytes()
    except OSError as e:
        print(f"Cannot read {path}: {e}", file=sys.stderr)
        return 2
    assembler = build_assembler(settings)
    try:
        report = asyncio.run(assembler.execute(data, path.name, None, on_progress=_print_progress))
    except ReadFlowError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if not report.succeeded:
        logger.warning(
            "Analysis of %s used fallbacks for: %s",
            path.name,
            ", ".join(str(task) for task in report.failures),
        )
    if as_json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(_format_report(report))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="readflow", description="Document reading assistant")
    parser.add_argument("--version", action="version", version=f"ReadFlow v{__version__}")
    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser("analyze", help="Analyze a local document")
    analyze.add_argument("path", type=Path)
    analyze.add_argument("--json", action="store_true", help="Print the report as JSON")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "analyze":
        settings = get_settings()
        configure_logging(settings.log_level)
        return _analyze(args.path, args.json, settings)
    if args.command == "serve":
        run_server(args.host, args.port)
        return 0
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
