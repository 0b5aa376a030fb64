"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from readflow.application.use_cases.analysis.assemble_result import ResultAssembler
from readflow.interfaces.api.app import create_app
from readflow.interfaces.api.resources.analyses import AnalysesResource, AnalysesStreamResource
from readflow.interfaces.api.resources.formats import FormatsResource
from readflow.interfaces.api.resources.health import HealthResource

BOUNDARY = "----ReadFlowBoundary"
MULTIPART_HEADERS = {"Content-Type": f"multipart/form-data; boundary={BOUNDARY}"}


def multipart_body(
    content: bytes,
    filename: str = "notes.txt",
    content_type: str | None = "text/plain",
    field: str = "file",
    disposition: str | None = None,
) -> bytes:
    """Single-part multipart/form-data body."""
    disposition = disposition or f'form-data; name="{field}"; filename="{filename}"'
    head = f"--{BOUNDARY}\r\nContent-Disposition: {disposition}\r\n"
    if content_type:
        head += f"Content-Type: {content_type}\r\n"
    head += "\r\n"
    return head.encode("utf-8") + content + f"\r\n--{BOUNDARY}--\r\n".encode("utf-8")


@pytest.fixture
def app(assembler: ResultAssembler):
    """Falcon ASGI app wired to the scripted gateway and fake OCR."""
    return create_app(
        analyses_resource=AnalysesResource(assembler),
        analyses_stream_resource=AnalysesStreamResource(assembler),
        formats_resource=FormatsResource(50 * 1024 * 1024),
        health_resource=HealthResource(ai_configured=True),
        cors_origins=["https://reader.example"],
    )


@pytest.fixture
def client(app):
    """Falcon ASGI test client."""
    return TestClient(app)
