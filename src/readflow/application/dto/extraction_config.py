"""Extraction configuration DTO."""

from dataclasses import dataclass, field


@dataclass
class ExtractionConfig:
    """Limits, thresholds and budgets for text extraction."""

    max_file_size_bytes: int = 50 * 1024 * 1024
    pdf_min_text_chars: int = 10
    ocr_min_text_chars: int = 100
    ocr_language: str = "chi_sim+eng"
    pdf_page_timeout: float = 30.0
    ocr_page_timeout: float = 120.0
    text_encodings: tuple[str, ...] = field(default=("gb18030", "cp1251"))
