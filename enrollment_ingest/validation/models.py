from dataclasses import dataclass, field

from enrollment_ingest.parsing.models import ParsedDocument, SubjectKey, SubjectRecord
from enrollment_ingest.validation.exceptions import ValidationFailure


class MappingReason:
    """Why a new subject cannot be added to a messaging group."""

    NO_ACTIVE_TERM = "No active term"
    SUBJECT_NOT_FOUND = "Subject not found"
    SECTION_NOT_FOUND = "Section not found"
    GROUP_NOT_CONFIGURED = "Messaging group not configured"


@dataclass(frozen=True)
class ValidationConfig:
    max_subjects: int = 8
    pending_states: tuple[str, ...] = ("pendiente", "confirmado", "procesando")


@dataclass(frozen=True)
class ValidationContext:
    fingerprint: str
    identity_id: str


@dataclass(frozen=True)
class MappedSubject:
    """A new subject after resolution against the active term's offerings."""

    subject: SubjectRecord
    can_add: bool
    reason: str | None = None
    group_materia_id: int | None = None
    group_jid: str | None = None

    @property
    def key(self) -> SubjectKey:
        return self.subject.key


@dataclass
class ValidationSummary:
    registration_number: str = ""
    student_name: str = ""
    total_subjects: int = 0
    new_subjects: int = 0
    duplicate_subjects: int = 0
    unmapped_subjects: int = 0
    valid_subjects: int = 0
    current_enrollment_count: int = 0
    would_exceed_limit: bool = False
    remaining_slots: int | None = None
    is_duplicate_document: bool = False
    has_pending_document: bool = False
    registration_mismatch: bool = False


@dataclass(slots=True)
class ValidationState:
    """Accumulates lookups and partial results as checks run."""

    parsed: ParsedDocument
    context: ValidationContext
    summary: ValidationSummary
    errors: list[str] = field(default_factory=list)
    accepted: list[SubjectKey] = field(default_factory=list)
    new_subjects: list[SubjectRecord] = field(default_factory=list)
    duplicate_subjects: list[SubjectRecord] = field(default_factory=list)
    mapped_subjects: list[MappedSubject] = field(default_factory=list)


@dataclass
class ValidationOutcome:
    summary: ValidationSummary
    errors: list[str] = field(default_factory=list)
    mapped_subjects: list[MappedSubject] = field(default_factory=list)
    failure: ValidationFailure | None = None

    @property
    def rejected(self) -> bool:
        return self.failure is not None

    @property
    def addable_subjects(self) -> list[MappedSubject]:
        return [s for s in self.mapped_subjects if s.can_add]
