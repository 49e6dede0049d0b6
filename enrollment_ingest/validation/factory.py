from enrollment_ingest.config.settings import Settings
from enrollment_ingest.store.base import BaseEnrollmentStore
from enrollment_ingest.validation.chain import ValidationChain
from enrollment_ingest.validation.checks import (
    DuplicateDocumentCheck,
    GroupMappingCheck,
    PendingDocumentCheck,
    QuotaCheck,
    RegistrationConsistencyCheck,
    SubjectDedupCheck,
)
from enrollment_ingest.validation.models import ValidationConfig


def build_validation_config(settings: Settings) -> ValidationConfig:
    return ValidationConfig(
        max_subjects=settings.max_subjects_per_student,
        pending_states=tuple(settings.pending_document_states),
    )


def build_validation_chain(store: BaseEnrollmentStore, config: ValidationConfig) -> ValidationChain:
    """Assemble the checks in their business order."""
    return ValidationChain(
        [
            DuplicateDocumentCheck(store),
            RegistrationConsistencyCheck(store),
            PendingDocumentCheck(store, config),
            SubjectDedupCheck(store),
            QuotaCheck(config),
            GroupMappingCheck(store),
        ]
    )
