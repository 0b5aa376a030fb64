"""Document descriptor - an accepted input file."""

from dataclasses import dataclass

from readflow.domain.value_objects import DocumentKind


@dataclass(frozen=True)
class DocumentDescriptor:
    """Name, size and resolved kind of an accepted file."""

    name: str
    size_bytes: int
    kind: DocumentKind

    def to_dict(self) -> dict:
        return {"name": self.name, "sizeBytes": self.size_bytes, "kind": self.kind.value}
