from dataclasses import dataclass, field

from enrollment_ingest.validation.models import ValidationSummary


@dataclass(frozen=True)
class RawDocument:
    """An uploaded receipt as received, never mutated."""

    data: bytes = field(repr=False)
    mime_type: str
    file_name: str
    identity_id: str | None = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class PhaseTimings:
    """Milliseconds spent in each pipeline phase."""

    ocr_ms: float = 0.0
    parse_ms: float = 0.0
    validation_ms: float = 0.0
    persist_ms: float = 0.0


@dataclass
class ProcessingResult:
    """Outcome of running one document through the pipeline."""

    index: int
    file_name: str
    file_size: int
    mime_type: str
    success: bool = False
    duration_ms: float = 0.0
    fingerprint: str = ""
    timings: PhaseTimings | None = None
    extracted_data: ValidationSummary | None = None
    validation_errors: list[str] = field(default_factory=list)
    error: str | None = None
    error_type: str | None = None
