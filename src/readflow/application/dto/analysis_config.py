"""Analysis configuration DTO."""

from dataclasses import dataclass, field

DEFAULT_FLAGGED_TERMS: tuple[str, ...] = (
    "性交", "做爱", "上床", "强奸", "性行为", "开房", "约炮",
    "阴道", "阴茎", "阴部", "阳具", "精液", "高潮", "自慰",
    "裸照", "裸露", "乳房", "胸部", "骚",
)


@dataclass
class AnalysisConfig:
    """Thresholds and budgets for the AI orchestration stage."""

    long_document_threshold: int = 8000
    chunk_size: int = 6000
    chunk_break_ratio: float = 0.6

    summary_input_chars: int = 6000
    synthesis_input_chars: int = 12000
    key_points_input_chars: int = 3000
    outline_input_chars: int = 4000
    mind_map_input_chars: int = 3000

    summary_max_tokens: int = 2200
    key_points_max_tokens: int = 800
    outline_max_tokens: int = 1500
    mind_map_max_tokens: int = 2000
    mind_map_chunk_max_tokens: int = 1500

    key_points_limit: int = 10
    mind_map_max_children: int = 6
    mind_map_max_depth: int = 3
    fallback_outline_lines: int = 10

    content_policy_marker: str = "data_inspection_failed"
    flagged_terms: tuple[str, ...] = field(default=DEFAULT_FLAGGED_TERMS)
    aggressive_max_chars: int = 3500

    ai_call_timeout: float = 120.0
    mind_map_timeout: float = 180.0
