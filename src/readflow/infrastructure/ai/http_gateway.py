"""HTTP completion gateway speaking the {prompt, maxTokens, type} protocol."""

import logging

import httpx

from readflow.application.dto.completion import CompletionRequest, CompletionResponse

logger = logging.getLogger(__name__)


class HttpCompletionGateway:
    """Posts completion requests to an analysis gateway endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = 120.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._client = client

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        try:
            if self._client is not None:
                r = await self._client.post(self._url, json=request.to_dict(), timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    r = await client.post(self._url, json=request.to_dict())
        except httpx.HTTPError as e:
            logger.warning("Gateway request to %s failed: %s", self._url, e)
            return CompletionResponse.failed(f"Gateway request failed: {e}")

        if not r.is_success:
            return CompletionResponse.failed(f"{r.status_code} - {r.text}")
        try:
            body = r.json()
        except ValueError:
            logger.warning("Gateway returned non-JSON body (%d bytes)", len(r.content))
            return CompletionResponse.failed("Gateway returned malformed JSON")
        if not isinstance(body, dict):
            return CompletionResponse.failed("Gateway returned malformed JSON")
        if not body.get("success"):
            return CompletionResponse.failed(str(body.get("error") or "Gateway reported failure"))
        data = body.get("data")
        if not isinstance(data, str):
            return CompletionResponse.failed("Gateway response has no data")
        return CompletionResponse.ok(data)
