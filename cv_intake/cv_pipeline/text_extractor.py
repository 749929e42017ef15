"""Extract raw text from uploaded CV files (PDF, DOCX, plain text). In-memory only."""

import re
import unicodedata
from io import BytesIO
from typing import Any, Dict, List, Optional

import pdfplumber
from docx import Document

from cv_intake.config import (
    MAX_CV_CHARS,
    MAX_UPLOAD_BYTES,
    MIME_DOCX,
    MIME_PDF,
    MIME_TEXT,
    SUPPORTED_MIME_TYPES,
)
from cv_intake.schemas.parsed_cv import ExtractedText
from cv_intake.utils.exceptions import ExtractionError, FileTooLargeError, UnsupportedFileTypeError
from cv_intake.utils.logger import get_logger

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"


def _normalize_unicode(text: str) -> str:
    """Normalize unicode (NFC) and replace problematic chars."""
    if not text:
        return ""
    return unicodedata.normalize("NFC", text).replace("\u00a0", " ")


def _clean_cv_text(text: str, max_chars: Optional[int] = None) -> str:
    """Remove excessive whitespace and normalize unicode for CV content."""
    if not text or not text.strip():
        return ""
    t = _normalize_unicode(text)
    t = t.replace("\r\n", "\n").replace("\r", "\n")
    t = re.sub(r"[ \t]+", " ", t)
    t = re.sub(r"\n\s*\n\s*\n", "\n\n", t)
    t = t.strip()
    max_chars = MAX_CV_CHARS if max_chars is None else max_chars
    if len(t) > max_chars:
        t = t[:max_chars] + "\n\n[Content truncated.]"
    return t


def _extract_pdf(file_bytes: bytes) -> ExtractedText:
    """
    Extract text from PDF using pdfplumber, page by page.
    Image-only pages yield "" so a scanned CV comes back empty rather than failing.
    """
    try:
        with pdfplumber.open(BytesIO(file_bytes)) as pdf:
            parts: List[str] = []
            empty_pages = 0
            for page in pdf.pages:
                ptext = page.extract_text() or ""
                if not ptext.strip():
                    empty_pages += 1
                parts.append(ptext)
            page_count = len(pdf.pages)
    except Exception as e:
        logger.warning("PDF extraction failed: %s", e)
        raise ExtractionError(f"PDF parsing failed: {e}", details={"cause": str(e)}) from e

    return ExtractedText(
        content=_clean_cv_text("\n".join(parts)),
        metadata={
            "type": "pdf",
            "pages": page_count,
            "empty_pages": empty_pages,
            "size": len(file_bytes),
        },
    )


def _extract_docx(file_bytes: bytes) -> ExtractedText:
    """Extract text from DOCX using python-docx: paragraphs, then table cells."""
    try:
        doc = Document(BytesIO(file_bytes))
    except Exception as e:
        logger.warning("DOCX extraction failed: %s", e)
        raise ExtractionError(f"DOCX parsing failed: {e}", details={"cause": str(e)}) from e

    messages: List[str] = []
    parts = [p.text for p in doc.paragraphs if p.text.strip()]
    if not parts:
        messages.append("Document has no text paragraphs")

    # Many CV templates keep contact details and sidebars in tables
    table_lines = 0
    for t_idx, table in enumerate(doc.tables):
        try:
            for row in table.rows:
                seen: List[str] = []
                for cell in row.cells:
                    text = cell.text.strip()
                    # merged cells repeat the same text across the row
                    if text and text not in seen:
                        seen.append(text)
                if seen:
                    parts.append(" | ".join(seen))
                    table_lines += 1
        except Exception as e:
            messages.append(f"Table {t_idx + 1} skipped: {e}")

    return ExtractedText(
        content=_clean_cv_text("\n".join(parts)),
        metadata={
            "type": "docx",
            "paragraphs": len(doc.paragraphs),
            "tables": len(doc.tables),
            "table_lines": table_lines,
            "messages": messages,
        },
    )


def _extract_txt(file_bytes: bytes, declared: bool = True) -> ExtractedText:
    """
    UTF-8 decode. Declared text never fails: undecodable bytes become U+FFFD
    and are noted in metadata. Undeclared bytes that are not UTF-8 are treated
    as binary and raise UnsupportedFileTypeError.
    """
    messages: List[str] = []
    try:
        content = file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        if not declared:
            raise UnsupportedFileTypeError("", SUPPORTED_MIME_TYPES) from e
        logger.warning("Text upload is not valid UTF-8, replacing bad bytes: %s", e)
        content = file_bytes.decode("utf-8-sig", errors="replace")
        messages.append(f"Invalid UTF-8 bytes replaced: {e.reason} at position {e.start}")
    return ExtractedText(
        content=_clean_cv_text(content),
        metadata={"type": "text", "encoding": "utf-8", "size": len(file_bytes), "messages": messages},
    )


def _normalize_mime(mime_type: str) -> str:
    return (mime_type or "").split(";", 1)[0].strip().lower()


def extract_text(file_bytes: bytes, mime_type: str) -> ExtractedText:
    """
    Extract and clean text from an uploaded CV buffer.

    Dispatches on the declared MIME type; an unknown type is sniffed for the
    PDF magic number and otherwise decoded as UTF-8 text.

    Raises:
        FileTooLargeError: buffer above MAX_UPLOAD_BYTES
        ExtractionError: malformed PDF or DOCX
        UnsupportedFileTypeError: unknown type whose bytes are not text
    """
    data = bytes(file_bytes or b"")
    if len(data) > MAX_UPLOAD_BYTES:
        raise FileTooLargeError(len(data), MAX_UPLOAD_BYTES)

    mime = _normalize_mime(mime_type)
    if mime == MIME_PDF:
        return _extract_pdf(data)
    if mime == MIME_DOCX:
        return _extract_docx(data)
    if mime == MIME_TEXT:
        return _extract_txt(data)

    # Try to detect by content
    if data[:4] == PDF_MAGIC:
        logger.info("Sniffed PDF content for declared type %r", mime_type)
        return _extract_pdf(data)
    try:
        return _extract_txt(data, declared=False)
    except UnsupportedFileTypeError as e:
        raise UnsupportedFileTypeError(mime_type, SUPPORTED_MIME_TYPES) from e


def describe_extraction(extracted: ExtractedText) -> Dict[str, Any]:
    """Short summary for logs: type, length and any extraction messages."""
    meta = extracted.metadata or {}
    return {
        "type": meta.get("type"),
        "chars": len(extracted.content),
        "messages": meta.get("messages", []),
    }
