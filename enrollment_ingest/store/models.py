from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StoredDocument:
    """A receipt already known to the store."""

    id: int
    fingerprint: str
    status: str
    uploaded_at: datetime | None = None


@dataclass(frozen=True)
class OfferingLookup:
    """Result of resolving (term, subject code, section code) to an offering.

    The flags tell apart the different ways a lookup can fail so the
    validation chain can report a precise reason.
    """

    subject_found: bool
    section_found: bool
    group_materia_id: int | None = None
    subject_name: str | None = None
    group_jid: str | None = None

    @property
    def offering_found(self) -> bool:
        return self.group_materia_id is not None
