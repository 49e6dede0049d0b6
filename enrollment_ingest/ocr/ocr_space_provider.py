from typing import Any

import httpx

from enrollment_ingest.logging.logger import Log
from enrollment_ingest.ocr.base import BaseOcrProvider
from enrollment_ingest.ocr.exceptions import OcrProviderError
from enrollment_ingest.ocr.models import OcrConfig, has_credential
from enrollment_ingest.ocr.openai_vision_provider import to_data_url

_FILE_TYPES = {
    "application/pdf": "PDF",
    "image/png": "PNG",
    "image/webp": "WEBP",
}


class OcrSpaceProvider(BaseOcrProvider):
    """Hosted OCR through the OCR.space parse/image endpoint."""

    name = "ocr_space"

    def __init__(self, config: OcrConfig, client: httpx.Client | None = None) -> None:
        self._config = config
        self._client = client

    @property
    def is_configured(self) -> bool:
        return has_credential(self._config.ocr_space_api_key)

    def extract(self, data: bytes, mime_type: str) -> str:
        form = {
            "base64Image": to_data_url(data, mime_type),
            "apikey": self._config.ocr_space_api_key,
            "filetype": _FILE_TYPES.get(mime_type, "JPG"),
            "OCREngine": str(self._config.ocr_space_engine),
        }
        try:
            response = self._post(form)
            response.raise_for_status()
            payload: dict[str, Any] = response.json()
        except httpx.HTTPError as exc:
            raise OcrProviderError(f"OCR.space request failed: {exc}") from exc
        except ValueError as exc:
            raise OcrProviderError(f"OCR.space returned invalid JSON: {exc}") from exc

        Log.debug(f"OCR.space response: {str(payload)[:500]}")
        if payload.get("IsErroredOnProcessing"):
            messages = payload.get("ErrorMessage") or "OCR.space processing error"
            if isinstance(messages, list):
                messages = messages[0]
            raise OcrProviderError(str(messages))

        results = payload.get("ParsedResults") or []
        text = results[0].get("ParsedText") if results else None
        if not text or not text.strip():
            raise OcrProviderError("No text extracted from OCR.space")
        return text

    def _post(self, form: dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return self._client.post(self._config.ocr_space_url, data=form)
        with httpx.Client(timeout=self._config.ocr_space_timeout_seconds) as client:
            return client.post(self._config.ocr_space_url, data=form)
