"""OpenAI-compatible chat completion gateway."""

import logging

from openai import APIConnectionError, APIStatusError, AsyncOpenAI, OpenAIError

from readflow.application.dto.completion import CompletionRequest, CompletionResponse

logger = logging.getLogger(__name__)


class OpenAICompletionGateway:
    """Completion gateway using an OpenAI-compatible chat completions API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        temperature: float = 0.7,
        top_p: float = 0.8,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(base_url=base_url, api_key=api_key)
        self._model = model
        self._temperature = temperature
        self._top_p = top_p

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Send one user message. Vendor errors come back as a failed response."""
        logger.debug(
            "Completion request: type=%s, prompt=%d chars, max_tokens=%d",
            request.task_type, len(request.prompt), request.max_tokens,
        )
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": request.prompt}],
                max_tokens=request.max_tokens,
                temperature=self._temperature,
                top_p=self._top_p,
                stream=False,
            )
        except APIStatusError as e:
            logger.warning("Completion API returned %s for %s", e.status_code, request.task_type)
            return CompletionResponse.failed(f"{e.status_code} - {e.response.text or e.message}")
        except APIConnectionError as e:
            logger.warning("Completion API unreachable: %s", e)
            return CompletionResponse.failed(f"Connection failed: {e}")
        except OpenAIError as e:
            logger.warning("Completion API error: %s", e)
            return CompletionResponse.failed(str(e))

        if not response.choices:
            return CompletionResponse.failed("Completion response contained no choices")
        content = response.choices[0].message.content
        if content is None:
            return CompletionResponse.failed("Completion response contained no content")
        return CompletionResponse.ok(content)
