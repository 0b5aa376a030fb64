"""Chunker port - text splitting."""

from typing import Protocol

from readflow.domain.entities import Chunk


class Chunker(Protocol):
    """Port for splitting text into bounded chunks."""

    def split(self, text: str, max_len: int) -> list[Chunk]: ...
