"""Document analysis API resources."""

import asyncio
import json
import logging
import re
from urllib.parse import unquote_to_bytes

import falcon.asgi

from readflow.application.use_cases.analysis.assemble_result import ResultAssembler
from readflow.domain.exceptions import (
    ExtractionFailed,
    FileTooLarge,
    ReadFlowError,
    UnsupportedFormat,
)
from readflow.interfaces.api.progress_channel import ProgressChannel

logger = logging.getLogger(__name__)

# RFC 5987: filename*=charset''percent-encoded (two single quotes)
_FILENAME_STAR_RFC5987 = re.compile(r"([\w-]+)''(.+)")

_FILE_FIELDS = ("file", "files", "files[]")


def _decode_filename(raw: str | None) -> str:
    """Decode filename to UTF-8, fixing mojibake when UTF-8 bytes were read as Latin-1."""
    if not raw or not raw.strip():
        return ""
    raw = raw.strip()
    try:
        return raw.encode("latin-1").decode("utf-8")
    except UnicodeEncodeError:
        return raw
    except UnicodeDecodeError:
        try:
            return raw.encode("latin-1").decode("cp1251")
        except (UnicodeEncodeError, UnicodeDecodeError):
            return raw


def _parse_filename_star_from_header(raw_header_value: bytes) -> str | None:
    """Parse Content-Disposition raw value for filename*=charset''percent-encoded (RFC 5987)."""
    if not raw_header_value:
        return None
    decoded = raw_header_value.decode("utf-8", errors="replace")
    idx = decoded.find("filename*=")
    if idx == -1:
        return None
    rest = decoded[idx + len("filename*=") :].strip()
    match = _FILENAME_STAR_RFC5987.match(rest)
    if not match:
        return None
    charset, encoded = match.groups()
    try:
        return unquote_to_bytes(encoded).decode(charset)
    except (ValueError, LookupError):
        return None


def _part_headers(part: object) -> dict:
    headers = getattr(part, "_headers", None)
    return headers if isinstance(headers, dict) else {}


def _get_part_filename(part: object) -> str:
    """Get filename from multipart part: part.filename, else filename* from the raw header."""
    raw = (getattr(part, "filename", None) or "").strip()
    if not raw:
        cd = _part_headers(part).get(b"content-disposition", b"")
        raw_star = _parse_filename_star_from_header(cd)
        if raw_star:
            raw = raw_star.strip()
    decoded = _decode_filename(raw) if raw else ""
    return decoded or "document"


def _get_part_content_type(part: object) -> str | None:
    """Declared Content-Type of the part; None when the client sent none."""
    raw = _part_headers(part).get(b"content-type")
    if not raw:
        return None
    return raw.decode("latin-1").strip() or None


def _sse_event(event: str, data: dict) -> bytes:
    """Format one Server-Sent Event (event + data)."""
    payload = json.dumps(data, ensure_ascii=False)
    return f"event: {event}\ndata: {payload}\n\n".encode("utf-8")


def _error_status(error: ReadFlowError) -> str:
    if isinstance(error, UnsupportedFormat):
        return falcon.HTTP_400
    if isinstance(error, FileTooLarge):
        return falcon.HTTP_413
    if isinstance(error, ExtractionFailed):
        return falcon.HTTP_422
    return falcon.HTTP_500


def _error_kind(error: Exception) -> str:
    return type(error).__name__


async def _read_part(part, max_bytes: int) -> tuple[bytes, int]:
    """Read a file part; bytes past ``max_bytes + 1`` are counted, not kept."""
    buffer = bytearray()
    size = 0
    async for chunk in part.stream:
        size += len(chunk)
        room = max_bytes + 1 - len(buffer)
        if room > 0:
            buffer += chunk[:room]
    return bytes(buffer), size


async def _read_upload(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, max_bytes: int
) -> tuple[bytes, int, str, str | None] | None:
    """Read the first file part as (data, size, filename, content type).

    Sets a 400 response and returns None when the body has no usable file part.
    """
    content_type = req.content_type or ""
    if "multipart/form-data" not in content_type:
        resp.status = falcon.HTTP_400
        resp.media = {"error": "multipart/form-data required"}
        return None
    try:
        form = await req.get_media()
        async for part in form:
            name = (part.name or "").strip()
            if name not in _FILE_FIELDS:
                continue
            data, size = await _read_part(part, max_bytes)
            if not size:
                continue
            return data, size, _get_part_filename(part), _get_part_content_type(part)
    except falcon.MediaMalformedError as e:
        resp.status = falcon.HTTP_400
        resp.media = {"error": f"Invalid multipart: {e.description or e.title}"}
        return None
    resp.status = falcon.HTTP_400
    resp.media = {"error": "file required"}
    return None


class AnalysesResource:
    """POST /v1/analyses - analyze one uploaded document, respond with the report."""

    def __init__(self, assembler: ResultAssembler) -> None:
        self._assembler = assembler

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        upload = await _read_upload(req, resp, self._assembler.max_file_size_bytes)
        if upload is None:
            return
        data, size, filename, content_type = upload
        try:
            self._assembler.describe(filename, content_type, size)
            report = await self._assembler.execute(data, filename, content_type)
        except (UnsupportedFormat, FileTooLarge, ExtractionFailed) as e:
            logger.info("Rejected %s: %s", filename, e)
            resp.status = _error_status(e)
            resp.media = {"error": str(e), "kind": _error_kind(e)}
            return
        resp.media = report.to_dict()
        resp.status = falcon.HTTP_200


class AnalysesStreamResource:
    """POST /v1/analyses/stream - analyze one document, stream progress then the report via SSE."""

    def __init__(self, assembler: ResultAssembler) -> None:
        self._assembler = assembler

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        upload = await _read_upload(req, resp, self._assembler.max_file_size_bytes)
        if upload is None:
            return
        data, size, filename, content_type = upload
        try:
            self._assembler.describe(filename, content_type, size)
        except (UnsupportedFormat, FileTooLarge) as e:
            logger.info("Rejected %s: %s", filename, e)
            resp.status = _error_status(e)
            resp.media = {"error": str(e), "kind": _error_kind(e)}
            return

        resp.status = falcon.HTTP_200
        resp.content_type = "text/event-stream"
        resp.cache_control = ["no-store"]
        resp.stream = self._stream_analysis_events(data, filename, content_type)

    async def _stream_analysis_events(self, data: bytes, filename: str, content_type: str | None):
        """Async generator yielding SSE events: progress (per event) then result or error."""
        channel = ProgressChannel()
        task = asyncio.create_task(
            self._assembler.execute(data, filename, content_type, on_progress=channel)
        )
        task.add_done_callback(lambda _: channel.close())
        try:
            async for event in channel:
                yield _sse_event("progress", event.to_dict())
            try:
                report = await task
            except ReadFlowError as e:
                yield _sse_event("error", {"message": str(e), "kind": _error_kind(e)})
                return
            except Exception:
                logger.exception("Analysis of %s crashed", filename)
                yield _sse_event("error", {"message": "Internal error", "kind": "InternalError"})
                return
            yield _sse_event("result", report.to_dict())
        finally:
            if not task.done():
                task.cancel()
