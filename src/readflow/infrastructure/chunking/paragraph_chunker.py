"""Paragraph-aligned text chunker."""

from readflow.domain.entities import Chunk


class ParagraphChunker:
    """Chunker that cuts fixed windows, backing off to the nearest line break."""

    def __init__(self, break_ratio: float = 0.6) -> None:
        self._break_ratio = break_ratio

    def split(self, text: str, max_len: int) -> list[Chunk]:
        """Split text into contiguous chunks of at most max_len characters."""
        if max_len <= 0:
            raise ValueError(f"max_len must be positive, got {max_len}")
        if len(text) <= max_len:
            return [Chunk(index=0, total_chunks=1, text=text)]

        pieces: list[str] = []
        start = 0
        while start < len(text):
            end = min(start + max_len, len(text))
            if end < len(text):
                last_break = text.rfind("\n", start, end + 1)
                # The break only wins when the chunk stays reasonably long.
                if last_break > start + max_len * self._break_ratio:
                    end = last_break
            pieces.append(text[start:end])
            start = end
        total = len(pieces)
        return [Chunk(index=i, total_chunks=total, text=p) for i, p in enumerate(pieces)]
