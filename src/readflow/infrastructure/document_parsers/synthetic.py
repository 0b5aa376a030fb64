"""Labelled synthetic bodies for documents with no extractable text."""

from pathlib import Path

from readflow.domain.entities import DEGRADED_CONTENT_MARKER, DocumentDescriptor

_MAX_OUTLINE_TITLES = 10

_TOPIC_HINTS: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("guide", "handbook", "manual", "指南", "手册"),
        "This looks like a guidance document. It probably covers:\n"
        "- a systematic methodology\n"
        "- practical step-by-step instructions\n"
        "- worked cases and applications\n"
        "- answers to common questions",
    ),
    (
        ("report", "whitepaper", "报告", "白皮书"),
        "This looks like a report. It probably covers:\n"
        "- background and scope\n"
        "- findings and supporting data\n"
        "- conclusions and recommendations",
    ),
    (
        ("thesis", "paper", "论文", "研究"),
        "This looks like an academic paper. It probably covers:\n"
        "- research question and related work\n"
        "- method and experiments\n"
        "- results and discussion",
    ),
)


def guess_topic(file_name: str) -> str:
    """Heuristic topic guess derived from the file name."""
    stem = Path(file_name).stem
    keywords = stem.lower()
    for hints, analysis in _TOPIC_HINTS:
        if any(h in keywords for h in hints):
            return analysis
    return (
        f'Based on the file name "{stem}" this may be a specialist document; '
        "run OCR on it for an accurate content analysis."
    )


def build_pdf_fallback_description(
    file_name: str,
    page_count: int,
    outline_titles: list[str] | None = None,
) -> str:
    """Describe a scanned PDF whose text could not be recovered, even by OCR."""
    stem = Path(file_name).stem
    lines = [
        DEGRADED_CONTENT_MARKER,
        f'Synthetic analysis content for the scanned PDF "{stem}".',
        "",
        "Document information:",
        f"- File name: {file_name}",
        f"- Pages: {page_count}",
        "- Type: PDF document (image scan, no text layer)",
    ]
    titles = [t for t in (outline_titles or []) if t.strip()]
    if titles:
        lines += ["", "Detected document structure:"]
        lines += [f"{i}. {t.strip()}" for i, t in enumerate(titles[:_MAX_OUTLINE_TITLES], start=1)]
        if len(titles) > _MAX_OUTLINE_TITLES:
            lines.append(f"... and {len(titles) - _MAX_OUTLINE_TITLES} more sections")
    lines += [
        "",
        "Topic guess from the file name:",
        guess_topic(file_name),
        "",
        "Note: the text could not be extracted or recognized. The content above is "
        "inferred from the file name and document structure only.",
    ]
    return "\n".join(lines)


def build_empty_document_notice(descriptor: DocumentDescriptor) -> str:
    """Labelled body for a non-PDF document that yielded no text."""
    return "\n".join(
        [
            DEGRADED_CONTENT_MARKER,
            f'No readable text was found in "{descriptor.name}".',
            "",
            "Document information:",
            f"- File name: {descriptor.name}",
            f"- Type: {descriptor.kind.value}",
            f"- Size: {descriptor.size_bytes} bytes",
            "",
            "Topic guess from the file name:",
            guess_topic(descriptor.name),
        ]
    )
