"""AI completion request/response DTOs."""

from dataclasses import dataclass

from readflow.domain.value_objects import AnalysisTask


@dataclass(frozen=True)
class CompletionRequest:
    """Prompt sent to the AI completion gateway."""

    prompt: str
    max_tokens: int
    task_type: AnalysisTask

    def to_dict(self) -> dict:
        return {"prompt": self.prompt, "maxTokens": self.max_tokens, "type": self.task_type.value}


@dataclass(frozen=True)
class CompletionResponse:
    """Gateway outcome: completion text on success, error text otherwise."""

    success: bool
    data: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, data: str) -> "CompletionResponse":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, error: str) -> "CompletionResponse":
        return cls(success=False, error=error)
