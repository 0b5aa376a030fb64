"""AI analysis task types."""

from enum import StrEnum


class AnalysisTask(StrEnum):
    """Analysis tasks; values are the task types sent to the completion gateway."""

    SUMMARY = "summary"
    KEY_POINTS = "keyPoints"
    OUTLINE = "outline"
    MIND_MAP = "mindMap"
