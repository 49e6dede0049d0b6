from abc import ABC, abstractmethod
from collections.abc import Sequence

from enrollment_ingest.parsing.models import ParsedDocument, SubjectKey
from enrollment_ingest.store.models import OfferingLookup, StoredDocument
from enrollment_ingest.validation.models import MappedSubject


class BaseEnrollmentStore(ABC):
    """Lookups and writes the pipeline needs from the host application's store.

    Implementations must be safe to call from several worker threads at once.
    """

    @abstractmethod
    def find_document_by_fingerprint(self, fingerprint: str) -> StoredDocument | None:
        """Return the stored receipt with this content hash, if any."""

    @abstractmethod
    def get_identity_registration(self, identity_id: str) -> str | None:
        """Return the registration number recorded for an identity, if any."""

    @abstractmethod
    def find_pending_document(
        self, identity_id: str, states: Sequence[str]
    ) -> StoredDocument | None:
        """Return the most recent receipt of an identity in one of ``states``."""

    @abstractmethod
    def get_accepted_subjects(self, identity_id: str) -> list[SubjectKey]:
        """Return the (sigla, grupo) pairs already accepted for an identity."""

    @abstractmethod
    def get_active_term(self) -> int | None:
        """Return the id of the currently open enrollment term, if any."""

    @abstractmethod
    def resolve_offering(self, term_id: int, sigla: str, grupo: str) -> OfferingLookup:
        """Resolve a subject/section pair against a term's offering catalog."""

    @abstractmethod
    def persist(
        self,
        parsed: ParsedDocument,
        fingerprint: str,
        mapped_subjects: Sequence[MappedSubject],
        identity_id: str,
    ) -> None:
        """Store the receipt and its mapped subjects. Idempotent per fingerprint.

        Raises:
            StoreError: if the write cannot be completed.
        """
