import base64

import httpx
import openai

from enrollment_ingest.ocr.base import BaseOcrProvider
from enrollment_ingest.ocr.exceptions import OcrProviderError
from enrollment_ingest.ocr.models import OcrConfig, has_credential
from enrollment_ingest.pdf.exceptions import PdfExtractionError
from enrollment_ingest.pdf.pymupdf_adapter import render_pages

EXTRACTION_PROMPT = (
    "Extract ALL text from this enrollment document (boleta de inscripción). "
    "Return ONLY the raw text, preserving line breaks and formatting. Include: "
    "registration number, student name, and complete table of subjects with "
    "SIGLA, GRUPO, and MATERIA columns."
)


class OpenAIVisionProvider(BaseOcrProvider):
    """Transcribes receipts with a vision-capable OpenAI chat model."""

    name = "openai_vision"

    def __init__(self, config: OcrConfig) -> None:
        self._config = config
        self._client: openai.OpenAI | None = None

    @property
    def is_configured(self) -> bool:
        return has_credential(self._config.openai_api_key)

    def extract(self, data: bytes, mime_type: str) -> str:
        try:
            image_parts = self._image_parts(data, mime_type)
        except PdfExtractionError as exc:
            raise OcrProviderError(f"OpenAI vision could not render PDF: {exc}") from exc

        try:
            response = self._get_client().chat.completions.create(
                model=self._config.openai_model,
                max_tokens=self._config.openai_max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": EXTRACTION_PROMPT},
                            *image_parts,
                        ],
                    }
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise OcrProviderError(f"OpenAI vision network error: {exc}") from exc
        except openai.APIError as exc:
            raise OcrProviderError(f"OpenAI vision API error: {exc}") from exc
        except openai.OpenAIError as exc:
            raise OcrProviderError(f"OpenAI vision client error: {exc}") from exc

        if not response.choices:
            raise OcrProviderError("OpenAI vision returned no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise OcrProviderError("No text extracted from OpenAI vision")
        return content

    def _get_client(self) -> openai.OpenAI:
        if self._client is None:
            self._client = openai.OpenAI(
                api_key=self._config.openai_api_key,
                timeout=self._config.openai_timeout_seconds,
            )
        return self._client

    def _image_parts(self, data: bytes, mime_type: str) -> list[dict[str, object]]:
        if mime_type == "application/pdf":
            images = [
                ("image/png", page)
                for page in render_pages(data, self._config.tesseract_pdf_dpi)
            ]
        else:
            images = [(mime_type, data)]
        return [
            {"type": "image_url", "image_url": {"url": to_data_url(image, kind)}}
            for kind, image in images
        ]


def to_data_url(data: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
