"""AI completion gateway port."""

from typing import Protocol

from readflow.application.dto.completion import CompletionRequest, CompletionResponse


class CompletionGateway(Protocol):
    """Port for AI completion. Reports vendor failures in the response instead of raising."""

    async def complete(self, request: CompletionRequest) -> CompletionResponse: ...
