import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from enrollment_ingest.processor.models import RawDocument
from enrollment_ingest.store.memory_store import InMemoryEnrollmentStore

RECEIPT_LINES = [
    "BOLETA DE INSCRIPCION",
    "223456789",
    "Juan Perez Lopez",
    "| INF412 | SA | PROGRAMACION III |",
    "| MAT101 | Z1 | CALCULO I |",
]

RECEIPT_TEXT = "\n".join(RECEIPT_LINES)


def _pdf(*pages: list[str]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for lines in pages:
        y = 720
        for line in lines:
            c.drawString(72, y, line)
            y -= 18
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def receipt_text() -> str:
    return RECEIPT_TEXT


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Single-page receipt PDF with a text layer."""
    return _pdf(RECEIPT_LINES)


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Two-page PDF with known text on each page."""
    return _pdf(["Page one content"], ["Page two content"])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Valid PDF with a blank page and no text layer."""
    return _pdf([])


@pytest.fixture()
def raw_image() -> RawDocument:
    return RawDocument(data=b"\x89PNG fake image", mime_type="image/png", file_name="boleta.png")


@pytest.fixture()
def memory_store() -> InMemoryEnrollmentStore:
    """Store with an active term and both receipt subjects offered."""
    store = InMemoryEnrollmentStore(active_term=1)
    store.add_offering(1, "INF412", "SA", "PROGRAMACION III", "120363-inf412@g.us")
    store.add_offering(1, "MAT101", "Z1", "CALCULO I", "120363-mat101@g.us")
    return store
