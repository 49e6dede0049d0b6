from enrollment_ingest.ocr.base import BaseOcrProvider
from enrollment_ingest.ocr.factory import OcrOrchestratorFactory
from enrollment_ingest.ocr.orchestrator import OcrOrchestrator

__all__ = ["BaseOcrProvider", "OcrOrchestrator", "OcrOrchestratorFactory"]
