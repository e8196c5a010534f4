"""Tests for PDF text extraction."""

import io

import pytest
from pypdf import PdfWriter

from daily_tracker.integrations.pdf import PdfExtractionError, extract_text


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


class TestExtractText:
    def test_empty_upload(self):
        with pytest.raises(PdfExtractionError):
            extract_text(b"")

    def test_not_a_pdf(self):
        with pytest.raises(PdfExtractionError):
            extract_text(b"definitely not a pdf document")

    def test_pdf_without_text(self):
        with pytest.raises(PdfExtractionError, match="No extractable text"):
            extract_text(_blank_pdf())

    def test_error_is_a_value_error(self):
        assert issubclass(PdfExtractionError, ValueError)
