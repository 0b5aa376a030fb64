"""Supported formats endpoint."""

import falcon.asgi

from readflow.domain.value_objects import DocumentKind
from readflow.infrastructure.document_parsers import supported_extensions


class FormatsResource:
    """GET /v1/formats - accepted file extensions and document kinds."""

    def __init__(self, max_file_size_bytes: int) -> None:
        self._max_file_size_bytes = max_file_size_bytes

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        resp.media = {
            "extensions": supported_extensions(),
            "kinds": [k.value for k in DocumentKind],
            "maxFileSizeBytes": self._max_file_size_bytes,
        }
        resp.status = falcon.HTTP_200
