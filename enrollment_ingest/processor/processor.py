import time

from enrollment_ingest.config.settings import Settings
from enrollment_ingest.logging.logger import Log
from enrollment_ingest.ocr.exceptions import OcrError
from enrollment_ingest.ocr.factory import OcrOrchestratorFactory
from enrollment_ingest.ocr.orchestrator import OcrOrchestrator
from enrollment_ingest.parsing.exceptions import ParseInvalidError
from enrollment_ingest.parsing.parser import DocumentParser
from enrollment_ingest.processor.hasher import fingerprint
from enrollment_ingest.processor.models import PhaseTimings, ProcessingResult, RawDocument
from enrollment_ingest.store.base import BaseEnrollmentStore
from enrollment_ingest.store.exceptions import StoreError
from enrollment_ingest.validation.chain import ValidationChain
from enrollment_ingest.validation.exceptions import ValidationFailure
from enrollment_ingest.validation.factory import build_validation_chain, build_validation_config
from enrollment_ingest.validation.models import ValidationContext

# Failures a receipt can legitimately end in; anything else is logged with a traceback.
EXPECTED_FAILURES = (OcrError, ParseInvalidError, ValidationFailure, StoreError)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 3)


class DocumentProcessor:
    """Runs one receipt through hash -> OCR -> parse -> validate -> persist.

    ``process`` never raises for a bad document: every failure inside the
    pipeline is turned into a ProcessingResult with ``success=False``.
    """

    def __init__(
        self,
        ocr: OcrOrchestrator,
        parser: DocumentParser,
        validator: ValidationChain,
        store: BaseEnrollmentStore,
        identity_template: str = "test_{registration_number}@c.us",
    ) -> None:
        self._ocr = ocr
        self._parser = parser
        self._validator = validator
        self._store = store
        self._identity_template = identity_template

    def process(
        self,
        document: RawDocument,
        index: int = 0,
        skip_persist: bool = True,
        detailed_metrics: bool = True,
    ) -> ProcessingResult:
        start = time.perf_counter()
        result = ProcessingResult(
            index=index,
            file_name=document.file_name,
            file_size=document.size,
            mime_type=document.mime_type,
        )
        timings = PhaseTimings()
        try:
            self._run(document, result, timings, skip_persist)
            result.success = True
        except EXPECTED_FAILURES as exc:
            result.error = str(exc)
            result.error_type = type(exc).__name__
            Log.error(
                f"Error processing file {document.file_name}: {exc} "
                f"(validation errors: {result.validation_errors})"
            )
        except Exception as exc:
            result.error = str(exc)
            result.error_type = type(exc).__name__
            Log.exception(f"Unexpected error processing file {document.file_name}")

        if detailed_metrics:
            result.timings = timings
        result.duration_ms = _elapsed_ms(start)
        return result

    def _run(
        self,
        document: RawDocument,
        result: ProcessingResult,
        timings: PhaseTimings,
        skip_persist: bool,
    ) -> None:
        # Step 1: Fingerprint
        result.fingerprint = fingerprint(document.data)

        # Step 2: OCR
        step_start = time.perf_counter()
        text = self._ocr.extract_text(document.data, document.mime_type)
        timings.ocr_ms = _elapsed_ms(step_start)

        # Step 3: Parse
        step_start = time.perf_counter()
        parsed = self._parser.parse(text)
        timings.parse_ms = _elapsed_ms(step_start)
        if not parsed.is_valid:
            result.validation_errors.append("Invalid document: could not extract basic data")
            raise ParseInvalidError("Invalid document format")

        # Step 4: Validate
        identity_id = document.identity_id or self._identity_template.format(
            registration_number=parsed.registration_number
        )
        step_start = time.perf_counter()
        outcome = self._validator.validate(
            parsed,
            ValidationContext(fingerprint=result.fingerprint, identity_id=identity_id),
        )
        timings.validation_ms = _elapsed_ms(step_start)
        result.extracted_data = outcome.summary
        result.validation_errors.extend(outcome.errors)
        if outcome.failure is not None:
            raise outcome.failure

        # Step 5: Persist
        if not skip_persist:
            step_start = time.perf_counter()
            self._store.persist(parsed, result.fingerprint, outcome.mapped_subjects, identity_id)
            timings.persist_ms = _elapsed_ms(step_start)

        Log.info(
            f"Processed {document.file_name}: {outcome.summary.valid_subjects} valid, "
            f"{outcome.summary.unmapped_subjects} unmapped, "
            f"{outcome.summary.duplicate_subjects} already enrolled"
        )


def build_processor(settings: Settings, store: BaseEnrollmentStore) -> DocumentProcessor:
    """Build a DocumentProcessor with all required adapters."""
    validation_config = build_validation_config(settings)
    return DocumentProcessor(
        ocr=OcrOrchestratorFactory.create(settings),
        parser=DocumentParser(),
        validator=build_validation_chain(store, validation_config),
        store=store,
        identity_template=settings.identity_template,
    )
