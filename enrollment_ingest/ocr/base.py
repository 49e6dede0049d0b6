from abc import ABC, abstractmethod


class BaseOcrProvider(ABC):
    """Contract for one link of the OCR fallback chain."""

    name: str = ""

    @property
    def is_configured(self) -> bool:
        """Whether the provider has the credentials it needs to be tried."""
        return True

    @abstractmethod
    def extract(self, data: bytes, mime_type: str) -> str:
        """Return the transcript of a document.

        Raises:
            OcrProviderError: on any failure, including an empty transcript.
        """
