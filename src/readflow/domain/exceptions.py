"""Domain exceptions."""


class ReadFlowError(Exception):
    """Base exception for ReadFlow."""

    pass


class UnsupportedFormat(ReadFlowError):
    """Document kind could not be resolved from media type or extension."""

    pass


class FileTooLarge(ReadFlowError):
    """Document exceeds the configured size ceiling."""

    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        super().__init__(f"File size {size_bytes} bytes exceeds limit of {max_bytes} bytes")
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes


class ExtractionFailed(ReadFlowError):
    """Text could not be extracted from the document bytes."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class AITaskFailed(ReadFlowError):
    """An AI analysis task failed; carries the task name and the cause."""

    def __init__(self, task: str, cause: str | BaseException) -> None:
        super().__init__(f"AI task '{task}' failed: {cause}")
        self.task = task
        self.cause = cause


class JSONRepairExhausted(ReadFlowError):
    """AI response could not be repaired into the expected JSON shape."""

    def __init__(self, message: str, cleaned: str = "") -> None:
        super().__init__(message)
        self.cleaned = cleaned


class Timeout(ReadFlowError, TimeoutError):
    """A stage exceeded its time budget."""

    def __init__(self, stage: str, seconds: float) -> None:
        super().__init__(f"{stage} exceeded time budget of {seconds:g}s")
        self.stage = stage
        self.seconds = seconds
