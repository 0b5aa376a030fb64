"""Deterministic outline and mind map builders used when AI output is unusable."""

from readflow.domain.entities import MindMapNode, OutlineNode

FALLBACK_ROOT_LABEL = "Document analysis"


def build_fallback_outline(text: str, max_lines: int = 10) -> list[OutlineNode]:
    """Level-1 sections from heading-like lines among the first non-empty lines."""
    lines = [line.strip() for line in (text or "").split("\n") if line.strip()]
    outline: list[OutlineNode] = []
    for i, line in enumerate(lines[:max_lines]):
        if 10 < len(line) < 100:
            following = lines[i + 1][:100] if i + 1 < len(lines) else ""
            outline.append(
                OutlineNode(
                    id=f"section-{len(outline) + 1}",
                    title=line,
                    level=1,
                    content=f"{following}..." if following else "",
                )
            )
    if outline:
        return outline
    return [
        OutlineNode(
            id="section-1",
            title="Document content",
            level=1,
            content=f"{(text or '').strip()[:200]}...",
        )
    ]


def _static_mind_map() -> MindMapNode:
    return MindMapNode(
        id="root",
        label=FALLBACK_ROOT_LABEL,
        children=[
            MindMapNode(
                id="main",
                label="Main content",
                children=[
                    MindMapNode(id="point1", label="Key point 1"),
                    MindMapNode(id="point2", label="Key point 2"),
                ],
            ),
            MindMapNode(
                id="structure",
                label="Document structure",
                children=[
                    MindMapNode(id="intro", label="Introduction"),
                    MindMapNode(id="body", label="Body"),
                    MindMapNode(id="conclusion", label="Conclusion"),
                ],
            ),
        ],
    )


def build_fallback_mind_map(text: str = "", max_branches: int = 5) -> MindMapNode:
    """Root with the first lines of the text as branches, or a static tree without text."""
    lines = [line.strip() for line in (text or "").split("\n") if line.strip()]
    if not lines:
        return _static_mind_map()
    return MindMapNode(
        id="root",
        label=FALLBACK_ROOT_LABEL,
        children=[
            MindMapNode(id=f"branch-{i}", label=line[:40])
            for i, line in enumerate(lines[:max_branches], start=1)
        ],
    )
