import io
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from docx import Document

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


SAMPLE_CV_TEXT = """Jane Doe
jane.doe@example.com
(555) 123-4567

PROFESSIONAL SUMMARY
Experienced product designer with eight years building consumer apps across fintech and health.

WORK EXPERIENCE
Senior Product Designer at Acme Corp
Jan 2020 - Present
Led design for the mobile onboarding flow.

SKILLS
Technical: Figma, Sketch
"""


def _pdf_bytes(content_stream: bytes = b"") -> bytes:
    """Single-page PDF with a correct xref table; the page draws content_stream with Helvetica."""
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>",
        b"<< /Length %d >>\nstream\n" % len(content_stream) + content_stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = io.BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(b"%d 0 obj\n" % number + body + b"\nendobj\n")
    xref_at = out.tell()
    out.write(b"xref\n0 %d\n" % (len(objects) + 1))
    out.write(b"0000000000 65535 f \n")
    for offset in offsets:
        out.write(b"%010d 00000 n \n" % offset)
    out.write(b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1))
    out.write(b"startxref\n%d\n%%%%EOF\n" % xref_at)
    return out.getvalue()


@pytest.fixture
def sample_cv_text() -> str:
    return SAMPLE_CV_TEXT


@pytest.fixture
def blank_pdf_bytes() -> bytes:
    """A PDF whose only page has no text (like an image-only scan)."""
    return _pdf_bytes()


@pytest.fixture
def text_pdf_bytes() -> bytes:
    return _pdf_bytes(b"BT /F1 12 Tf 72 720 Td (Jane Doe) Tj ET")


@pytest.fixture
def make_docx_bytes():
    """Build an in-memory DOCX from paragraphs and optional table rows."""

    def _make(paragraphs=(), table_rows=()) -> bytes:
        doc = Document()
        for text in paragraphs:
            doc.add_paragraph(text)
        if table_rows:
            table = doc.add_table(rows=len(table_rows), cols=len(table_rows[0]))
            for r, row in enumerate(table_rows):
                for c, value in enumerate(row):
                    table.cell(r, c).text = value
        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()

    return _make


def chat_response(content):
    """Object shaped like an OpenAI chat completion response."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def mock_openai_client():
    """AsyncOpenAI stand-in whose chat.completions.create returns the given content or raises."""

    def _make(content=None, side_effect=None):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            return_value=chat_response(content),
            side_effect=side_effect,
        )
        return client

    return _make
