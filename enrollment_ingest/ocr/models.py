from dataclasses import dataclass

# Values shipped in the sample .env files; treated the same as no key.
PLACEHOLDER_KEYS = frozenset({"your_openai_api_key_here", "your_ocr_space_api_key_here"})


def has_credential(value: str) -> bool:
    stripped = value.strip()
    return bool(stripped) and stripped not in PLACEHOLDER_KEYS


@dataclass(frozen=True)
class OcrConfig:
    """Provider credentials and tuning, resolved once from Settings."""

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_timeout_seconds: int = 60
    openai_max_tokens: int = 1500
    ocr_space_api_key: str = ""
    ocr_space_url: str = "https://api.ocr.space/parse/image"
    ocr_space_engine: int = 3
    ocr_space_timeout_seconds: int = 60
    tesseract_cmd: str = ""
    tesseract_lang: str = "spa"
    tesseract_min_chars: int = 10
    tesseract_pdf_dpi: int = 300
