import io

import pytesseract
from PIL import Image, UnidentifiedImageError

from enrollment_ingest.logging.logger import Log
from enrollment_ingest.ocr.base import BaseOcrProvider
from enrollment_ingest.ocr.exceptions import OcrProviderError
from enrollment_ingest.ocr.models import OcrConfig
from enrollment_ingest.pdf.base import BasePdfExtractor
from enrollment_ingest.pdf.exceptions import PdfExtractionError
from enrollment_ingest.pdf.pymupdf_adapter import render_pages


class TesseractProvider(BaseOcrProvider):
    """Local OCR with Tesseract. Needs no credentials and is always tried last.

    PDFs are read from their text layer first; scanned PDFs without one are
    rasterised page by page and OCR'd like images.
    """

    name = "tesseract"

    def __init__(self, config: OcrConfig, pdf_extractor: BasePdfExtractor) -> None:
        self._config = config
        self._pdf_extractor = pdf_extractor
        if config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = config.tesseract_cmd

    def extract(self, data: bytes, mime_type: str) -> str:
        try:
            if mime_type == "application/pdf":
                text = self._extract_pdf(data)
            else:
                text = self._recognize(data)
        except PdfExtractionError as exc:
            raise OcrProviderError(str(exc)) from exc

        if len(text.strip()) < self._config.tesseract_min_chars:
            raise OcrProviderError("Insufficient text extracted from Tesseract")
        return text

    def _extract_pdf(self, data: bytes) -> str:
        text = self._pdf_extractor.extract(data)
        if len(text.strip()) >= self._config.tesseract_min_chars:
            Log.debug("Using embedded PDF text layer")
            return text
        pages = render_pages(data, self._config.tesseract_pdf_dpi)
        return "\n".join(self._recognize(page) for page in pages)

    def _recognize(self, image_bytes: bytes) -> str:
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                return pytesseract.image_to_string(image, lang=self._config.tesseract_lang)
        except UnidentifiedImageError as exc:
            raise OcrProviderError(f"Unreadable image: {exc}") from exc
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            raise OcrProviderError(f"Tesseract failed: {exc}") from exc
