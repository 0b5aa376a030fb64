"""Tesseract OCR engine."""

import asyncio
import io
import logging

import pytesseract
from PIL import Image

logger = logging.getLogger(__name__)


class TesseractOCREngine:
    """OCR engine using pytesseract on PNG page images."""

    def __init__(self, tesseract_cmd: str | None = None, psm_mode: int = 3) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self._psm_mode = psm_mode

    def _recognize_sync(self, image: bytes, language: str) -> str:
        with Image.open(io.BytesIO(image)) as picture:
            text = pytesseract.image_to_string(
                picture,
                lang=language,
                config=f"--psm {self._psm_mode}",
            )
        logger.debug("OCR recognized %d characters", len(text.strip()))
        return text.strip()

    async def recognize(self, image: bytes, language: str) -> str:
        return await asyncio.to_thread(self._recognize_sync, image, language)
