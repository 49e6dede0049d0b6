import unicodedata
from collections.abc import Sequence

from enrollment_ingest.logging.logger import Log
from enrollment_ingest.ocr.base import BaseOcrProvider
from enrollment_ingest.ocr.exceptions import AllProvidersFailedError, OcrProviderError


class OcrOrchestrator:
    """Tries OCR providers strictly in order until one returns a transcript.

    Unconfigured providers are skipped without being called. A configured
    provider that fails is logged and the next one is tried; providers are
    never raced and never retried here.
    """

    def __init__(self, providers: Sequence[BaseOcrProvider]) -> None:
        if not providers:
            raise ValueError("OcrOrchestrator needs at least one provider")
        self._providers = tuple(providers)

    @property
    def providers(self) -> tuple[BaseOcrProvider, ...]:
        return self._providers

    def extract_text(self, data: bytes, mime_type: str) -> str:
        failures: dict[str, str] = {}
        for provider in self._providers:
            if not provider.is_configured:
                Log.debug(f"OCR provider {provider.name} not configured, skipping")
                continue
            try:
                text = provider.extract(data, mime_type)
            except OcrProviderError as exc:
                Log.warning(f"OCR provider {provider.name} failed: {exc}")
                failures[provider.name] = str(exc)
                continue
            Log.info(f"OCR provider {provider.name} extracted {len(text)} chars")
            # Transcripts reach the parser in composed form so accented
            # letters match a single code point in every pattern.
            return unicodedata.normalize("NFC", text)
        raise AllProvidersFailedError(failures)
