from enrollment_ingest.config.settings import Settings
from enrollment_ingest.pdf.base import BasePdfExtractor
from enrollment_ingest.pdf.pdfplumber_adapter import PdfPlumberAdapter
from enrollment_ingest.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfExtractorFactory:
    """Picks the text-layer reader the Tesseract provider tries before rasterising."""

    ADAPTERS: dict[str, type[BasePdfExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        return cls.for_engine(settings.pdf_engine)

    @classmethod
    def for_engine(cls, engine: str) -> BasePdfExtractor:
        adapter_cls = cls.ADAPTERS.get(engine.strip().lower())
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {', '.join(cls.ADAPTERS)}"
            )
        return adapter_cls()
