"""Application configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from readflow.application.dto.analysis_config import DEFAULT_FLAGGED_TERMS, AnalysisConfig
from readflow.application.dto.extraction_config import ExtractionConfig


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # AI completion API (OpenAI compatible)
    ai_api_url: str = Field(
        default="https://dashscope.aliyuncs.com/compatible-mode/v1",
        description="OpenAI-compatible chat completions API URL",
    )
    ai_api_key: str = Field(default="", description="AI API key")
    ai_model: str = Field(default="qwen-turbo", description="Chat model name")
    ai_temperature: float = Field(default=0.7, description="Sampling temperature")
    ai_top_p: float = Field(default=0.8, description="Nucleus sampling")
    ai_gateway_url: str = Field(
        default="",
        description="Analysis gateway URL speaking {prompt, maxTokens, type}; overrides ai_api_url",
    )

    # Limits
    max_file_size_bytes: int = Field(default=50 * 1024 * 1024, description="Upload size ceiling")

    # Analysis thresholds
    long_document_threshold: int = Field(default=8000, description="Chars above which summary is chunked")
    chunk_size: int = Field(default=6000, description="Max chunk length in chars")
    chunk_break_ratio: float = Field(default=0.6, description="Min share of a chunk before a line break cut")
    summary_input_chars: int = Field(default=6000)
    synthesis_input_chars: int = Field(default=12000)
    key_points_input_chars: int = Field(default=3000)
    outline_input_chars: int = Field(default=4000)
    mind_map_input_chars: int = Field(default=3000)
    summary_max_tokens: int = Field(default=2200)
    key_points_max_tokens: int = Field(default=800)
    outline_max_tokens: int = Field(default=1500)
    mind_map_max_tokens: int = Field(default=2000)
    mind_map_chunk_max_tokens: int = Field(default=1500)
    key_points_limit: int = Field(default=10)
    content_policy_marker: str = Field(
        default="data_inspection_failed",
        description="Error substring identifying a content-policy rejection",
    )
    flagged_terms: list[str] = Field(default_factory=lambda: list(DEFAULT_FLAGGED_TERMS))
    aggressive_max_chars: int = Field(default=3500)

    # Time budgets (seconds)
    ai_call_timeout: float = Field(default=120.0)
    pdf_page_timeout: float = Field(default=30.0)
    ocr_page_timeout: float = Field(default=120.0)
    mind_map_timeout: float = Field(default=180.0)

    # OCR
    ocr_language: str = Field(default="chi_sim+eng", description="Tesseract language hint")
    ocr_dpi: int = Field(default=144, description="Page render resolution for OCR")
    tesseract_cmd: str = Field(default="", description="Path to tesseract binary")
    pdf_min_text_chars: int = Field(default=10, description="Below this, a PDF is treated as scanned")
    ocr_min_text_chars: int = Field(default=100, description="Below this, OCR output is discarded")

    # Text decoding
    text_encodings: list[str] = Field(default_factory=lambda: ["gb18030", "cp1251"])

    # Application
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment name",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Debug mode")
    cors_origins: str = Field(default="*", description="Comma-separated allowed origins")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    def to_analysis_config(self) -> AnalysisConfig:
        return AnalysisConfig(
            long_document_threshold=self.long_document_threshold,
            chunk_size=self.chunk_size,
            chunk_break_ratio=self.chunk_break_ratio,
            summary_input_chars=self.summary_input_chars,
            synthesis_input_chars=self.synthesis_input_chars,
            key_points_input_chars=self.key_points_input_chars,
            outline_input_chars=self.outline_input_chars,
            mind_map_input_chars=self.mind_map_input_chars,
            summary_max_tokens=self.summary_max_tokens,
            key_points_max_tokens=self.key_points_max_tokens,
            outline_max_tokens=self.outline_max_tokens,
            mind_map_max_tokens=self.mind_map_max_tokens,
            mind_map_chunk_max_tokens=self.mind_map_chunk_max_tokens,
            key_points_limit=self.key_points_limit,
            content_policy_marker=self.content_policy_marker,
            flagged_terms=tuple(self.flagged_terms),
            aggressive_max_chars=self.aggressive_max_chars,
            ai_call_timeout=self.ai_call_timeout,
            mind_map_timeout=self.mind_map_timeout,
        )

    def to_extraction_config(self) -> ExtractionConfig:
        return ExtractionConfig(
            max_file_size_bytes=self.max_file_size_bytes,
            pdf_min_text_chars=self.pdf_min_text_chars,
            ocr_min_text_chars=self.ocr_min_text_chars,
            ocr_language=self.ocr_language,
            pdf_page_timeout=self.pdf_page_timeout,
            ocr_page_timeout=self.ocr_page_timeout,
            text_encodings=tuple(self.text_encodings),
        )

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
