"""Parser for .docx (Office Open XML Word)."""

import io
from zipfile import BadZipFile

from docx import Document as DocxDocument
from docx.opc.exceptions import PackageNotFoundError

from readflow.domain.exceptions import ExtractionFailed


def parse_docx(data: bytes) -> str:
    """Extract paragraph text, then table rows, from .docx bytes."""
    try:
        doc = DocxDocument(io.BytesIO(data))
    except (PackageNotFoundError, BadZipFile) as e:
        raise ExtractionFailed(f"Invalid or corrupted docx file: {e}") from e
    except Exception as e:
        raise ExtractionFailed(f"Unreadable docx file: {e}") from e
    paragraphs = [p.text for p in doc.paragraphs if p.text.strip()]
    tables_text: list[str] = []
    for table in doc.tables:
        for row in table.rows:
            cells = [c.text.strip() for c in row.cells if c.text.strip()]
            if cells:
                tables_text.append(" ".join(cells))
    text = "\n\n".join(paragraphs)
    if tables_text:
        text += "\n\n" + "\n".join(tables_text)
    return text.strip()
