"""Unit tests for completion gateways."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from readflow.application.dto.completion import CompletionRequest
from readflow.domain.value_objects import AnalysisTask
from readflow.infrastructure.ai.http_gateway import HttpCompletionGateway
from readflow.infrastructure.ai.openai_gateway import OpenAICompletionGateway

REQUEST = CompletionRequest(prompt="Summarize this", max_tokens=800, task_type=AnalysisTask.KEY_POINTS)
API_URL = "https://api.example.com/v1/chat/completions"


def _openai_gateway(create: AsyncMock) -> OpenAICompletionGateway:
    client = MagicMock()
    client.chat.completions.create = create
    return OpenAICompletionGateway(
        base_url="https://api.example.com/v1",
        api_key="sk-test",
        model="qwen-turbo",
        client=client,
    )


def _completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestOpenAICompletionGateway:
    """Tests for OpenAICompletionGateway."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        create = AsyncMock(return_value=_completion("💡 Point"))
        response = await _openai_gateway(create).complete(REQUEST)
        assert response.success is True
        assert response.data == "💡 Point"
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "qwen-turbo"
        assert kwargs["messages"] == [{"role": "user", "content": "Summarize this"}]
        assert kwargs["max_tokens"] == 800
        assert kwargs["temperature"] == 0.7
        assert kwargs["top_p"] == 0.8

    @pytest.mark.asyncio
    async def test_status_error_keeps_vendor_text(self) -> None:
        http_response = httpx.Response(
            400,
            request=httpx.Request("POST", API_URL),
            text='{"code": "data_inspection_failed"}',
        )
        error = openai.BadRequestError("Bad request", response=http_response, body=None)
        response = await _openai_gateway(AsyncMock(side_effect=error)).complete(REQUEST)
        assert response.success is False
        assert response.error.startswith("400 - ")
        assert "data_inspection_failed" in response.error

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        error = openai.APIConnectionError(request=httpx.Request("POST", API_URL))
        response = await _openai_gateway(AsyncMock(side_effect=error)).complete(REQUEST)
        assert response.success is False
        assert response.error.startswith("Connection failed")

    @pytest.mark.asyncio
    async def test_empty_choices(self) -> None:
        create = AsyncMock(return_value=SimpleNamespace(choices=[]))
        response = await _openai_gateway(create).complete(REQUEST)
        assert response.success is False

    @pytest.mark.asyncio
    async def test_missing_content(self) -> None:
        response = await _openai_gateway(AsyncMock(return_value=_completion(None))).complete(REQUEST)
        assert response.success is False
        assert "no content" in response.error


def _http_gateway(handler) -> HttpCompletionGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpCompletionGateway("https://gateway.example.com/analyze", client=client)


class TestHttpCompletionGateway:
    """Tests for HttpCompletionGateway."""

    @pytest.mark.asyncio
    async def test_posts_protocol_body(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "data": "done"})

        response = await _http_gateway(handler).complete(REQUEST)
        assert response.success is True
        assert response.data == "done"
        assert seen == [{"prompt": "Summarize this", "maxTokens": 800, "type": "keyPoints"}]

    @pytest.mark.asyncio
    async def test_reported_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": False, "error": "data_inspection_failed"})

        response = await _http_gateway(handler).complete(REQUEST)
        assert response.success is False
        assert response.error == "data_inspection_failed"

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="upstream down")

        response = await _http_gateway(handler).complete(REQUEST)
        assert response.error == "502 - upstream down"

    @pytest.mark.asyncio
    async def test_malformed_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        response = await _http_gateway(handler).complete(REQUEST)
        assert response.error == "Gateway returned malformed JSON"

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        response = await _http_gateway(handler).complete(REQUEST)
        assert response.success is False
        assert response.error.startswith("Gateway request failed")
