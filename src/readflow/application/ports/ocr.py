"""OCR and page rendering ports."""

from typing import Protocol


class PageRenderer(Protocol):
    """Port for rendering PDF pages to PNG bitmaps."""

    async def page_count(self, data: bytes) -> int: ...

    async def render(self, data: bytes, page_index: int) -> bytes: ...


class OCREngine(Protocol):
    """Port for recognizing text on a rendered page image."""

    async def recognize(self, image: bytes, language: str) -> str: ...
