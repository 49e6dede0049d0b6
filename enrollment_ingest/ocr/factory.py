from enrollment_ingest.config.settings import Settings
from enrollment_ingest.ocr.models import OcrConfig
from enrollment_ingest.ocr.ocr_space_provider import OcrSpaceProvider
from enrollment_ingest.ocr.openai_vision_provider import OpenAIVisionProvider
from enrollment_ingest.ocr.orchestrator import OcrOrchestrator
from enrollment_ingest.ocr.tesseract_provider import TesseractProvider
from enrollment_ingest.pdf.factory import PdfExtractorFactory


class OcrOrchestratorFactory:
    """Builds the OpenAI vision -> OCR.space -> Tesseract chain."""

    @classmethod
    def create(cls, settings: Settings) -> OcrOrchestrator:
        config = cls.build_config(settings)
        return OcrOrchestrator(
            [
                OpenAIVisionProvider(config),
                OcrSpaceProvider(config),
                TesseractProvider(config, PdfExtractorFactory.create(settings)),
            ]
        )

    @staticmethod
    def build_config(settings: Settings) -> OcrConfig:
        return OcrConfig(
            openai_api_key=settings.openai_api_key,
            openai_model=settings.openai_model_name,
            openai_timeout_seconds=settings.openai_timeout_seconds,
            openai_max_tokens=settings.openai_max_tokens,
            ocr_space_api_key=settings.ocr_space_api_key,
            ocr_space_url=settings.ocr_space_url,
            ocr_space_engine=settings.ocr_space_engine,
            ocr_space_timeout_seconds=settings.ocr_space_timeout_seconds,
            tesseract_cmd=settings.tesseract_cmd,
            tesseract_lang=settings.tesseract_lang,
            tesseract_min_chars=settings.tesseract_min_chars,
            tesseract_pdf_dpi=settings.tesseract_pdf_dpi,
        )
