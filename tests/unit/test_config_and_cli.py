"""Unit tests for settings and the command line entry point."""

import json
from pathlib import Path

import pytest

from readflow import __version__
from readflow.application.dto.completion import CompletionResponse
from readflow.application.use_cases.analysis.assemble_result import ResultAssembler
from readflow.config import Settings
from readflow.domain.entities import AnalysisReport, AnalysisResult, DocumentDescriptor, MindMapNode
from readflow.domain.value_objects import AnalysisTask, DocumentKind
from readflow.infrastructure.ai.http_gateway import HttpCompletionGateway
from readflow.infrastructure.ai.openai_gateway import OpenAICompletionGateway
from readflow.main import _format_report, build_gateway, build_parser, main
from tests.conftest import ScriptedGateway


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)
        analysis = settings.to_analysis_config()
        extraction = settings.to_extraction_config()
        assert analysis.long_document_threshold == 8000
        assert analysis.chunk_size == 6000
        assert analysis.mind_map_timeout == 180.0
        assert extraction.max_file_size_bytes == 50 * 1024 * 1024
        assert extraction.text_encodings == ("gb18030", "cp1251")

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHUNK_SIZE", "3000")
        monkeypatch.setenv("OCR_LANGUAGE", "eng")
        monkeypatch.setenv("FLAGGED_TERMS", '["alpha", "beta"]')
        settings = Settings(_env_file=None)
        assert settings.to_analysis_config().chunk_size == 3000
        assert settings.to_analysis_config().flagged_terms == ("alpha", "beta")
        assert settings.to_extraction_config().ocr_language == "eng"

    def test_cors_origin_list(self) -> None:
        settings = Settings(_env_file=None, cors_origins="https://a.example, https://b.example,")
        assert settings.cors_origin_list() == ["https://a.example", "https://b.example"]


class TestBuildGateway:
    def test_openai_by_default(self) -> None:
        settings = Settings(_env_file=None, ai_api_key="sk-test")
        assert isinstance(build_gateway(settings), OpenAICompletionGateway)

    def test_http_gateway_when_url_set(self) -> None:
        settings = Settings(_env_file=None, ai_gateway_url="https://gateway.example.com/analyze")
        assert isinstance(build_gateway(settings), HttpCompletionGateway)


class TestCli:
    """Tests for the readflow command."""

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_parser_subcommands(self) -> None:
        args = build_parser().parse_args(["analyze", "book.epub", "--json"])
        assert args.command == "analyze"
        assert args.path == Path("book.epub")
        assert args.json is True

    def test_missing_file(self, tmp_path: Path) -> None:
        assert main(["analyze", str(tmp_path / "missing.pdf")]) == 2

    def test_analyze_json(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        assembler: ResultAssembler,
    ) -> None:
        monkeypatch.setattr("readflow.main.build_assembler", lambda settings: assembler)
        path = tmp_path / "notes.md"
        path.write_text("# Notes\n\nReading every day compounds over the years.", encoding="utf-8")
        assert main(["analyze", str(path), "--json"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["document"]["kind"] == "md"
        assert report["result"]["mindMapData"]["label"] == "Reading"

    def test_analyze_unsupported(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, assembler: ResultAssembler) -> None:
        monkeypatch.setattr("readflow.main.build_assembler", lambda settings: assembler)
        path = tmp_path / "data.xlsx"
        path.write_bytes(b"PK")
        assert main(["analyze", str(path)]) == 1


class TestAnalyzeWithFallbacks:
    """analyze output when some tasks fell back."""

    @pytest.fixture
    def gateway(self) -> ScriptedGateway:
        return ScriptedGateway({AnalysisTask.KEY_POINTS: CompletionResponse.failed("quota exceeded")})

    def test_fallbacks_listed(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        assembler: ResultAssembler,
    ) -> None:
        monkeypatch.setattr("readflow.main.build_assembler", lambda settings: assembler)
        path = tmp_path / "notes.txt"
        path.write_text("Reading every day compounds over the years.", encoding="utf-8")
        assert main(["analyze", str(path)]) == 0
        out = capsys.readouterr().out
        assert "## Fallbacks used" in out
        assert "- keyPoints: " in out
        assert "quota exceeded" in out

    def test_clean_report_has_no_fallback_section(self) -> None:
        report = AnalysisReport(
            descriptor=DocumentDescriptor(name="notes.txt", size_bytes=4, kind=DocumentKind.TEXT),
            result=AnalysisResult(
                summary="Short summary.",
                key_points=["One point"],
                outline=[],
                mind_map=MindMapNode(id="root", label="Notes"),
            ),
        )
        assert report.succeeded is True
        assert "## Fallbacks used" not in _format_report(report)
