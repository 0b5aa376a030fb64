"""Parse progress event."""

from dataclasses import dataclass

from readflow.domain.value_objects import ProgressStage


@dataclass(frozen=True)
class ParseProgressEvent:
    """Observational progress report emitted by extractors."""

    stage: ProgressStage
    percent: int
    message: str
    page_index: int | None = None
    total_pages: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "percent", max(0, min(100, int(self.percent))))

    def to_dict(self) -> dict:
        data: dict = {"stage": self.stage.value, "percent": self.percent, "message": self.message}
        if self.page_index is not None:
            data["pageIndex"] = self.page_index
        if self.total_pages is not None:
            data["totalPages"] = self.total_pages
        return data
