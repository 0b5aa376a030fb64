"""Extraction progress stages."""

from enum import StrEnum


class ProgressStage(StrEnum):
    """Stage reported in a parse progress event."""

    LOADING = "loading"
    PARSING = "parsing"
    OCR = "ocr"
    DONE = "done"
