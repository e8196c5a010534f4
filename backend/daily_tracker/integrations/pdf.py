"""Text extraction from uploaded PDF resumes."""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)


class PdfExtractionError(ValueError):
    """The upload is not a readable PDF or holds no text."""


def extract_text(data: bytes) -> str:
    if not data:
        raise PdfExtractionError("Empty file")
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, ValueError, OSError) as exc:
        raise PdfExtractionError(f"Could not read PDF: {exc}") from exc

    text = "\n".join(p.strip() for p in pages if p.strip())
    if not text:
        raise PdfExtractionError("No extractable text in PDF (scanned document?)")
    logger.debug("Extracted %d chars from %d PDF pages", len(text), len(pages))
    return text
