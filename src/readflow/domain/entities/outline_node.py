"""Outline node - titled section of a document outline."""

from dataclasses import dataclass, field


@dataclass
class OutlineNode:
    """Section with optional summary and nested subsections."""

    id: str
    title: str
    level: int
    content: str | None = None
    children: list["OutlineNode"] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict = {"id": self.id, "title": self.title, "level": self.level}
        if self.content is not None:
            data["content"] = self.content
        data["children"] = [c.to_dict() for c in self.children]
        return data
