import pymupdf

from enrollment_ingest.pdf.base import BasePdfExtractor
from enrollment_ingest.pdf.exceptions import PdfExtractionError


class PyMuPdfAdapter(BasePdfExtractor):
    """Reads the PDF text layer with PyMuPDF."""

    def extract(self, pdf_bytes: bytes) -> str:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
            return "\n".join(pages).strip()
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf extraction failed: {exc}") from exc


def render_pages(pdf_bytes: bytes, dpi: int) -> list[bytes]:
    """Rasterise every page to PNG bytes for image OCR."""
    try:
        with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
            return [page.get_pixmap(dpi=dpi).tobytes("png") for page in doc]
    except Exception as exc:
        raise PdfExtractionError(f"pymupdf rendering failed: {exc}") from exc
