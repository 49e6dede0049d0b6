import threading
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from itertools import count

from enrollment_ingest.parsing.models import ParsedDocument, SubjectKey
from enrollment_ingest.store.base import BaseEnrollmentStore
from enrollment_ingest.store.exceptions import NoActiveTermError
from enrollment_ingest.store.models import OfferingLookup, StoredDocument
from enrollment_ingest.validation.models import MappedSubject


@dataclass
class _Offering:
    group_materia_id: int
    group_jid: str | None


@dataclass
class _Receipt:
    identity_id: str
    document: StoredDocument
    registration_number: str = ""
    student_name: str = ""
    pending_links: list[int] = field(default_factory=list)


class InMemoryEnrollmentStore(BaseEnrollmentStore):
    """Process-local store for dry runs and tests.

    Mirrors the PostgreSQL semantics closely enough for the pipeline:
    receipts are keyed by fingerprint, persisted receipts are marked
    ``completado`` and their subjects stay pending until accepted.
    """

    COMPLETED_STATUS = "completado"

    def __init__(self, active_term: int | None = None) -> None:
        self._lock = threading.Lock()
        self._ids = count(1)
        self._active_term = active_term
        self._receipts: dict[str, _Receipt] = {}
        self._registrations: dict[str, str] = {}
        self._accepted: dict[str, list[SubjectKey]] = {}
        self._subject_names: dict[str, str] = {}
        self._sections: set[str] = set()
        self._offerings: dict[tuple[int, str, str], _Offering] = {}

    # Seeding helpers

    def set_active_term(self, term_id: int | None) -> None:
        with self._lock:
            self._active_term = term_id

    def add_offering(
        self,
        term_id: int,
        sigla: str,
        grupo: str,
        subject_name: str,
        group_jid: str | None,
    ) -> int:
        with self._lock:
            self._subject_names[sigla] = subject_name
            self._sections.add(grupo)
            offering = _Offering(group_materia_id=next(self._ids), group_jid=group_jid)
            self._offerings[(term_id, sigla, grupo)] = offering
            return offering.group_materia_id

    def add_subject(self, sigla: str, subject_name: str) -> None:
        with self._lock:
            self._subject_names[sigla] = subject_name

    def add_section(self, grupo: str) -> None:
        with self._lock:
            self._sections.add(grupo)

    def register_identity(self, identity_id: str, registration_number: str) -> None:
        with self._lock:
            self._registrations[identity_id] = registration_number

    def add_document(self, identity_id: str, fingerprint: str, status: str) -> StoredDocument:
        with self._lock:
            document = StoredDocument(
                id=next(self._ids),
                fingerprint=fingerprint,
                status=status,
                uploaded_at=datetime.now(timezone.utc),
            )
            self._receipts[fingerprint] = _Receipt(identity_id=identity_id, document=document)
            return document

    def accept_subjects(self, identity_id: str, keys: Sequence[SubjectKey]) -> None:
        with self._lock:
            self._accepted.setdefault(identity_id, []).extend(keys)

    def pending_links(self, fingerprint: str) -> list[int]:
        with self._lock:
            receipt = self._receipts.get(fingerprint)
            return list(receipt.pending_links) if receipt else []

    # BaseEnrollmentStore

    def find_document_by_fingerprint(self, fingerprint: str) -> StoredDocument | None:
        with self._lock:
            receipt = self._receipts.get(fingerprint)
            return receipt.document if receipt else None

    def get_identity_registration(self, identity_id: str) -> str | None:
        with self._lock:
            return self._registrations.get(identity_id)

    def find_pending_document(
        self, identity_id: str, states: Sequence[str]
    ) -> StoredDocument | None:
        with self._lock:
            matches = [
                r.document
                for r in self._receipts.values()
                if r.identity_id == identity_id and r.document.status in states
            ]
        return max(matches, key=lambda d: d.id) if matches else None

    def get_accepted_subjects(self, identity_id: str) -> list[SubjectKey]:
        with self._lock:
            return sorted(
                set(self._accepted.get(identity_id, [])),
                key=lambda k: (k.sigla, k.grupo),
            )

    def get_active_term(self) -> int | None:
        with self._lock:
            return self._active_term

    def resolve_offering(self, term_id: int, sigla: str, grupo: str) -> OfferingLookup:
        with self._lock:
            subject_name = self._subject_names.get(sigla)
            section_found = grupo in self._sections
            offering = self._offerings.get((term_id, sigla, grupo))
        if offering is None:
            return OfferingLookup(
                subject_found=subject_name is not None,
                section_found=section_found,
                subject_name=subject_name,
            )
        return OfferingLookup(
            subject_found=True,
            section_found=True,
            group_materia_id=offering.group_materia_id,
            subject_name=subject_name,
            group_jid=offering.group_jid,
        )

    def persist(
        self,
        parsed: ParsedDocument,
        fingerprint: str,
        mapped_subjects: Sequence[MappedSubject],
        identity_id: str,
    ) -> None:
        with self._lock:
            if self._active_term is None:
                raise NoActiveTermError("No active term found")
            self._registrations[identity_id] = parsed.registration_number
            receipt = self._receipts.get(fingerprint)
            if receipt is None:
                document = StoredDocument(
                    id=next(self._ids),
                    fingerprint=fingerprint,
                    status=self.COMPLETED_STATUS,
                    uploaded_at=datetime.now(timezone.utc),
                )
                receipt = _Receipt(identity_id=identity_id, document=document)
                self._receipts[fingerprint] = receipt
            else:
                receipt.identity_id = identity_id
                receipt.document = replace(receipt.document, status=self.COMPLETED_STATUS)
            receipt.registration_number = parsed.registration_number
            receipt.student_name = parsed.student_name
            receipt.pending_links = [
                s.group_materia_id
                for s in mapped_subjects
                if s.can_add and s.group_materia_id is not None
            ]
