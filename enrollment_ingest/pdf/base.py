from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for reading the embedded text layer of a PDF."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Extract plain text from PDF bytes.

        Scanned receipts usually have no text layer, in which case an empty
        string is returned and the caller falls back to rasterising pages.

        Raises:
            PdfExtractionError: if the bytes cannot be opened as a PDF.
        """
