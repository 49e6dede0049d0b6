from abc import ABC, abstractmethod
from dataclasses import replace

from enrollment_ingest.logging.logger import Log
from enrollment_ingest.parsing.models import SubjectRecord
from enrollment_ingest.store.base import BaseEnrollmentStore
from enrollment_ingest.validation.exceptions import (
    DuplicateDocumentError,
    PendingDocumentExistsError,
    QuotaExceededError,
    RegistrationMismatchError,
)
from enrollment_ingest.validation.models import (
    MappedSubject,
    MappingReason,
    ValidationConfig,
    ValidationState,
)


class ValidationCheck(ABC):
    """One link of the validation chain.

    A check either returns the (possibly enriched) state or raises a
    ValidationFailure, which stops the chain for that document.
    """

    @abstractmethod
    def run(self, state: ValidationState) -> ValidationState:
        raise NotImplementedError


class DuplicateDocumentCheck(ValidationCheck):
    def __init__(self, store: BaseEnrollmentStore) -> None:
        self._store = store

    def run(self, state: ValidationState) -> ValidationState:
        existing = self._store.find_document_by_fingerprint(state.context.fingerprint)
        if existing is not None:
            state.summary.is_duplicate_document = True
            raise DuplicateDocumentError(state.context.fingerprint, existing.uploaded_at)
        return state


class RegistrationConsistencyCheck(ValidationCheck):
    def __init__(self, store: BaseEnrollmentStore) -> None:
        self._store = store

    def run(self, state: ValidationState) -> ValidationState:
        stored = self._store.get_identity_registration(state.context.identity_id)
        received = state.parsed.registration_number
        if stored is not None and stored != received:
            state.summary.registration_mismatch = True
            raise RegistrationMismatchError(expected=stored, received=received)
        return state


class PendingDocumentCheck(ValidationCheck):
    def __init__(self, store: BaseEnrollmentStore, config: ValidationConfig) -> None:
        self._store = store
        self._config = config

    def run(self, state: ValidationState) -> ValidationState:
        pending = self._store.find_pending_document(
            state.context.identity_id, self._config.pending_states
        )
        if pending is not None:
            state.summary.has_pending_document = True
            raise PendingDocumentExistsError(pending.status)
        return state


class SubjectDedupCheck(ValidationCheck):
    """Splits parsed subjects into new ones and ones already accepted."""

    def __init__(self, store: BaseEnrollmentStore) -> None:
        self._store = store

    def run(self, state: ValidationState) -> ValidationState:
        state.accepted = self._store.get_accepted_subjects(state.context.identity_id)
        accepted_keys = set(state.accepted)
        for subject in state.parsed.subjects:
            if subject.key in accepted_keys:
                state.duplicate_subjects.append(subject)
            else:
                state.new_subjects.append(subject)

        summary = state.summary
        summary.current_enrollment_count = len(state.accepted)
        summary.new_subjects = len(state.new_subjects)
        summary.duplicate_subjects = len(state.duplicate_subjects)
        if not state.new_subjects and state.duplicate_subjects:
            state.errors.append("All subjects on the receipt are already enrolled")
        return state


class QuotaCheck(ValidationCheck):
    def __init__(self, config: ValidationConfig) -> None:
        self._config = config

    def run(self, state: ValidationState) -> ValidationState:
        current = len(state.accepted)
        new = len(state.new_subjects)
        limit = self._config.max_subjects
        if current + new > limit:
            error = QuotaExceededError(current=current, new=new, limit=limit)
            state.summary.would_exceed_limit = True
            state.summary.remaining_slots = error.remaining_slots
            raise error
        state.summary.remaining_slots = limit - current - new
        return state


class GroupMappingCheck(ValidationCheck):
    """Resolves each new subject to a messaging group.

    Subjects that cannot be resolved are kept with ``can_add=False`` and a
    reason; they never fail the document.
    """

    def __init__(self, store: BaseEnrollmentStore) -> None:
        self._store = store

    def run(self, state: ValidationState) -> ValidationState:
        term_id = self._store.get_active_term() if state.new_subjects else None
        for subject in state.new_subjects:
            if term_id is None:
                mapped = MappedSubject(subject, can_add=False, reason=MappingReason.NO_ACTIVE_TERM)
            else:
                mapped = self._map(term_id, subject)
            state.mapped_subjects.append(mapped)

        unmapped = sum(1 for s in state.mapped_subjects if not s.can_add)
        state.summary.unmapped_subjects = unmapped
        state.summary.valid_subjects = len(state.mapped_subjects) - unmapped
        if unmapped:
            reasons = sorted({s.reason for s in state.mapped_subjects if s.reason})
            Log.debug(f"{unmapped} subject(s) unmapped: {reasons}")
            state.errors.append(
                f"{unmapped} subject(s) could not be mapped to a messaging group"
            )
        return state

    def _map(self, term_id: int, subject: SubjectRecord) -> MappedSubject:
        lookup = self._store.resolve_offering(term_id, subject.sigla, subject.grupo)
        if not lookup.subject_found:
            return MappedSubject(subject, can_add=False, reason=MappingReason.SUBJECT_NOT_FOUND)
        if not lookup.section_found:
            return MappedSubject(subject, can_add=False, reason=MappingReason.SECTION_NOT_FOUND)
        if not lookup.offering_found or not lookup.group_jid:
            return MappedSubject(
                subject, can_add=False, reason=MappingReason.GROUP_NOT_CONFIGURED
            )
        resolved = subject
        if lookup.subject_name:
            # The catalog name is authoritative over whatever OCR produced.
            resolved = replace(subject, materia=lookup.subject_name)
        return MappedSubject(
            resolved,
            can_add=True,
            group_materia_id=lookup.group_materia_id,
            group_jid=lookup.group_jid,
        )
