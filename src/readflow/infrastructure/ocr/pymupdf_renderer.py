"""PyMuPDF page renderer."""

import asyncio

import fitz  # PyMuPDF

# Twice the PDF user-space resolution; small print needs it for OCR.
DEFAULT_DPI = 144


def _page_count(data: bytes) -> int:
    with fitz.open(stream=data, filetype="pdf") as pdf_document:
        return pdf_document.page_count


def _render_png(data: bytes, page_index: int, dpi: int) -> bytes:
    with fitz.open(stream=data, filetype="pdf") as pdf_document:
        page = pdf_document[page_index]
        pix = page.get_pixmap(dpi=dpi)
        return pix.tobytes("png")


class PyMuPDFPageRenderer:
    """Renders PDF pages to PNG bytes in a worker thread."""

    def __init__(self, dpi: int = DEFAULT_DPI) -> None:
        self._dpi = dpi

    async def page_count(self, data: bytes) -> int:
        return await asyncio.to_thread(_page_count, data)

    async def render(self, data: bytes, page_index: int) -> bytes:
        return await asyncio.to_thread(_render_png, data, page_index, self._dpi)
