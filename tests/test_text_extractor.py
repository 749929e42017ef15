"""Tests for raw text extraction from PDF, DOCX and plain-text uploads."""

import pytest

from cv_intake.config import MIME_DOCX, MIME_PDF, MIME_TEXT
from cv_intake.cv_pipeline import text_extractor
from cv_intake.cv_pipeline.text_extractor import describe_extraction, extract_text
from cv_intake.utils.exceptions import ExtractionError, FileTooLargeError, UnsupportedFileTypeError


class TestPlainText:
    """Tests for text/plain uploads."""

    def test_decodes_utf8(self):
        """UTF-8 text comes back cleaned, with type metadata."""
        result = extract_text("Jane Doe\r\nZürich   Designer".encode("utf-8"), MIME_TEXT)
        assert result.content == "Jane Doe\nZürich Designer"
        assert result.metadata["type"] == "text"

    def test_strips_bom_and_mime_parameters(self):
        """A BOM and a charset parameter on the MIME type are tolerated."""
        result = extract_text(b"\xef\xbb\xbfHello", "text/plain; charset=utf-8")
        assert result.content == "Hello"

    def test_collapses_blank_line_runs(self):
        """Three or more newlines collapse to one blank line."""
        result = extract_text(b"A\n\n\n\nB", MIME_TEXT)
        assert result.content == "A\n\nB"

    def test_undecodable_declared_text_is_replaced(self):
        """Declared text that is not UTF-8 decodes with replacement characters and a message."""
        result = extract_text("René Müller\nDesigner".encode("cp1252"), MIME_TEXT)
        assert result.content == "Ren\ufffd M\ufffdller\nDesigner"
        assert len(result.metadata["messages"]) == 1
        assert "position 3" in result.metadata["messages"][0]

    def test_valid_utf8_has_no_messages(self):
        assert extract_text(b"Jane Doe", MIME_TEXT).metadata["messages"] == []

    def test_empty_buffer_gives_empty_content(self):
        """An empty text file is not an error, just empty."""
        assert extract_text(b"", MIME_TEXT).content == ""


class TestDocx:
    """Tests for DOCX uploads built in memory with python-docx."""

    def test_paragraphs_in_order(self, make_docx_bytes):
        """Non-empty paragraphs are joined with newlines in document order."""
        data = make_docx_bytes(["Jane Doe", "", "Product Designer"])
        result = extract_text(data, MIME_DOCX)
        assert result.content == "Jane Doe\nProduct Designer"
        assert result.metadata["type"] == "docx"

    def test_tables_contribute_text(self, make_docx_bytes):
        """Table rows are appended as ' | '-joined lines."""
        data = make_docx_bytes(["Jane Doe"], table_rows=[["Email", "jane@example.com"]])
        result = extract_text(data, MIME_DOCX)
        assert "Email | jane@example.com" in result.content
        assert result.metadata["tables"] == 1
        assert result.metadata["table_lines"] == 1

    def test_empty_document(self, make_docx_bytes):
        """A DOCX without text yields empty content and a message."""
        result = extract_text(make_docx_bytes(), MIME_DOCX)
        assert result.content == ""
        assert result.metadata["messages"]

    def test_malformed_docx_raises(self):
        """Bytes that are not a DOCX package raise ExtractionError with the cause."""
        with pytest.raises(ExtractionError) as exc_info:
            extract_text(b"definitely not a zip archive", MIME_DOCX)
        assert "cause" in exc_info.value.details


class TestPdf:
    """Tests for PDF uploads."""

    def test_text_page(self, text_pdf_bytes):
        """Text drawn on a page is extracted."""
        result = extract_text(text_pdf_bytes, MIME_PDF)
        assert "Jane Doe" in result.content
        assert result.metadata["pages"] == 1

    def test_image_only_page_is_empty_not_error(self, blank_pdf_bytes):
        """A page with no extractable text yields '' rather than raising."""
        result = extract_text(blank_pdf_bytes, MIME_PDF)
        assert result.content == ""
        assert result.metadata["empty_pages"] == 1

    def test_malformed_pdf_raises(self):
        """A broken PDF raises ExtractionError."""
        with pytest.raises(ExtractionError):
            extract_text(b"%PDF-1.4\nnot really a pdf", MIME_PDF)


class TestDispatch:
    """Tests for MIME dispatch, sniffing and limits."""

    def test_unknown_type_sniffs_pdf(self, blank_pdf_bytes):
        """An unknown MIME type with the %PDF magic number is read as PDF."""
        result = extract_text(blank_pdf_bytes, "application/octet-stream")
        assert result.metadata["type"] == "pdf"

    def test_unknown_type_falls_back_to_text(self):
        """An unknown MIME type with UTF-8 bytes is read as text."""
        result = extract_text(b"Jane Doe", "")
        assert result.content == "Jane Doe"
        assert result.metadata["type"] == "text"

    def test_unknown_binary_is_unsupported(self):
        """An unknown MIME type whose bytes are not text is unsupported."""
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            extract_text(b"\xff\xd8\xff\xe0binary", "image/jpeg")
        assert exc_info.value.details["mime_type"] == "image/jpeg"

    def test_oversized_buffer(self, monkeypatch):
        """Buffers above the upload limit are rejected before parsing."""
        monkeypatch.setattr(text_extractor, "MAX_UPLOAD_BYTES", 4)
        with pytest.raises(FileTooLargeError):
            extract_text(b"12345", MIME_TEXT)

    def test_long_text_is_truncated(self, monkeypatch):
        """Content over the character cap is cut with a marker."""
        monkeypatch.setattr(text_extractor, "MAX_CV_CHARS", 10)
        result = extract_text(b"x" * 50, MIME_TEXT)
        assert result.content.startswith("x" * 10)
        assert result.content.endswith("[Content truncated.]")

    def test_describe_extraction(self):
        summary = describe_extraction(extract_text(b"Hello", MIME_TEXT))
        assert summary == {"type": "text", "chars": 5, "messages": []}
