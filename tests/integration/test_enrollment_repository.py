import uuid
from typing import Any

import psycopg
import pytest

from enrollment_ingest.database.repositories.enrollment_repository import PostgresEnrollmentStore
from enrollment_ingest.parsing.models import ParsedDocument, SubjectRecord
from enrollment_ingest.validation.models import MappedSubject


def _make_parsed() -> ParsedDocument:
    return ParsedDocument(
        is_valid=True,
        registration_number="223456789",
        student_name="Juan Perez Lopez",
        subjects=(SubjectRecord(sigla="INF412", grupo="SA", materia="PROGRAMACION III"),),
    )


def _fingerprint() -> str:
    return uuid.uuid4().hex * 2


@pytest.mark.integration
class TestPostgresEnrollmentStore:
    def test_unknown_fingerprint(self, integration_pool: None) -> None:
        assert PostgresEnrollmentStore().find_document_by_fingerprint(_fingerprint()) is None

    def test_unknown_identity_has_no_registration(self, identity_id: str) -> None:
        store = PostgresEnrollmentStore()
        assert store.get_identity_registration(identity_id) is None
        assert store.get_accepted_subjects(identity_id) == []
        assert store.find_pending_document(identity_id, ["pendiente"]) is None

    def test_unknown_subject_is_not_resolved(self, active_term: int) -> None:
        lookup = PostgresEnrollmentStore().resolve_offering(active_term, "ZZZ999", "ZZ")
        assert lookup.subject_found is False
        assert lookup.section_found is False
        assert lookup.offering_found is False

    def test_persist_round_trip(self, active_term: int, identity_id: str) -> None:
        store = PostgresEnrollmentStore()
        fingerprint = _fingerprint()

        store.persist(_make_parsed(), fingerprint, [], identity_id)

        stored = store.find_document_by_fingerprint(fingerprint)
        assert stored is not None
        assert stored.status == PostgresEnrollmentStore.COMPLETED_STATUS
        assert store.get_identity_registration(identity_id) == "223456789"

    def test_persist_is_idempotent_per_fingerprint(
        self, active_term: int, identity_id: str
    ) -> None:
        store = PostgresEnrollmentStore()
        fingerprint = _fingerprint()

        store.persist(_make_parsed(), fingerprint, [], identity_id)
        first = store.find_document_by_fingerprint(fingerprint)
        store.persist(_make_parsed(), fingerprint, [], identity_id)
        second = store.find_document_by_fingerprint(fingerprint)

        assert first is not None and second is not None
        assert first.id == second.id

    def test_repersisting_does_not_recount_subjects(
        self, db_conn: psycopg.Connection[Any], active_term: int, identity_id: str
    ) -> None:
        with db_conn.cursor() as cur:
            cur.execute(
                "SELECT id FROM grupo_materia WHERE id_semestre = %s AND activo = true LIMIT 1",
                (active_term,),
            )
            row = cur.fetchone()
        db_conn.commit()
        if row is None:
            pytest.skip("No active offering in DB for integration test setup")
        mapped = MappedSubject(
            subject=_make_parsed().subjects[0], can_add=True, group_materia_id=int(row[0])
        )
        store = PostgresEnrollmentStore()
        fingerprint = _fingerprint()

        store.persist(_make_parsed(), fingerprint, [mapped], identity_id)
        store.persist(_make_parsed(), fingerprint, [mapped], identity_id)

        with db_conn.cursor() as cur:
            cur.execute(
                "SELECT total_materias_registradas FROM estudiantes WHERE id_whatsapp = %s",
                (identity_id,),
            )
            total = cur.fetchone()
        db_conn.commit()
        assert total is not None
        assert total[0] == 1
