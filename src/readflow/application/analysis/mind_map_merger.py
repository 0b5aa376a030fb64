"""Merge chunk-level mind maps into one bounded tree."""

import re

from readflow.domain.entities import MindMapNode

DEFAULT_ROOT_LABEL = "Document mind map"
ROOT_ID = "root"

_WHITESPACE = re.compile(r"\s+")


def normalize_label(label: str) -> str:
    """Key used to detect the same branch across chunks."""
    return _WHITESPACE.sub(" ", label or "").strip().casefold()


def _merge_children(target: list[MindMapNode], extra: list[MindMapNode]) -> None:
    index = {normalize_label(n.label): n for n in target}
    for node in extra:
        key = normalize_label(node.label)
        if not key:
            continue
        existing = index.get(key)
        if existing is None:
            existing = MindMapNode(id=node.id, label=node.label.strip(), children=[])
            index[key] = existing
            target.append(existing)
        if node.children:
            _merge_children(existing.children, node.children)


def clamp_mind_map(
    nodes: list[MindMapNode],
    max_children: int = 6,
    max_depth: int = 3,
    depth: int = 1,
) -> list[MindMapNode]:
    """Limit breadth per node and depth below the root; returns new nodes."""
    return [
        MindMapNode(
            id=n.id,
            label=n.label,
            children=(
                clamp_mind_map(n.children, max_children, max_depth, depth + 1)
                if depth < max_depth
                else []
            ),
        )
        for n in nodes[:max_children]
    ]


def assign_unique_ids(root: MindMapNode) -> MindMapNode:
    """Keep existing ids where unique; synthesize path-based ids for missing or repeated ones."""
    seen: set[str] = set()

    def _visit(node: MindMapNode, path: str) -> None:
        if not node.id or node.id in seen:
            node.id = path
            suffix = 1
            while node.id in seen:
                suffix += 1
                node.id = f"{path}-{suffix}"
        seen.add(node.id)
        for i, child in enumerate(node.children, start=1):
            _visit(child, f"{path}-{i}")

    _visit(root, root.id or ROOT_ID)
    return root


def merge_mind_maps(
    maps: list[MindMapNode],
    max_children: int = 6,
    max_depth: int = 3,
    default_label: str = DEFAULT_ROOT_LABEL,
) -> MindMapNode:
    """Merge maps by normalized label; root label comes from the first map with branches."""
    non_empty = [m for m in maps if m is not None and m.children]
    root_label = non_empty[0].label if non_empty and non_empty[0].label.strip() else default_label
    children: list[MindMapNode] = []
    for m in non_empty:
        _merge_children(children, m.children)
    root = MindMapNode(
        id=ROOT_ID,
        label=root_label,
        children=clamp_mind_map(children, max_children, max_depth),
    )
    return assign_unique_ids(root)
