"""Health check endpoints."""

import shutil

import falcon.asgi


class HealthResource:
    """Health and readiness endpoints."""

    def __init__(self, ai_configured: bool = True, tesseract_cmd: str = "tesseract") -> None:
        self._ai_configured = ai_configured
        self._tesseract_cmd = tesseract_cmd or "tesseract"

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health - liveness."""
        resp.media = {"status": "ok"}
        resp.status = falcon.HTTP_200

    async def on_get_ready(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health/ready - readiness (AI endpoint configured; OCR availability reported)."""
        checks = {
            "ai": self._ai_configured,
            "ocr": shutil.which(self._tesseract_cmd) is not None,
        }
        if self._ai_configured:
            resp.media = {"status": "ready", "checks": checks}
            resp.status = falcon.HTTP_200
        else:
            resp.media = {"status": "not_ready", "checks": checks}
            resp.status = falcon.HTTP_503
