"""Mind map node."""

from dataclasses import dataclass, field


@dataclass
class MindMapNode:
    """Labelled node of a mind map tree."""

    id: str
    label: str
    children: list["MindMapNode"] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "children": [c.to_dict() for c in self.children],
        }
