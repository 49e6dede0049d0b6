from collections.abc import Generator, Sequence
from contextlib import contextmanager
from dataclasses import asdict
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from enrollment_ingest.database.connection import get_connection
from enrollment_ingest.parsing.models import ParsedDocument, SubjectKey
from enrollment_ingest.store.base import BaseEnrollmentStore
from enrollment_ingest.store.exceptions import NoActiveTermError, StoreError
from enrollment_ingest.store.models import OfferingLookup, StoredDocument
from enrollment_ingest.validation.models import MappedSubject


class PostgresEnrollmentStore(BaseEnrollmentStore):
    """Enrollment lookups and receipt persistence over the shared PostgreSQL schema.

    Tables: estudiantes, boletas_inscripciones, boleta_grupo, grupo_materia,
    materias, grupos, semestres. Every method borrows its own pooled
    connection, so concurrent documents never share a transaction.
    """

    COMPLETED_STATUS = "completado"
    LINK_PENDING_STATUS = "pendiente"
    LINK_ACCEPTED_STATUS = "agregado"

    def find_document_by_fingerprint(self, fingerprint: str) -> StoredDocument | None:
        with _connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, documento_hash, estado, fecha_subida
                    FROM boletas_inscripciones
                    WHERE documento_hash = %s
                    """,
                    (fingerprint,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_stored_document(row)

    def get_identity_registration(self, identity_id: str) -> str | None:
        with _connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT numero_registro FROM estudiantes WHERE id_whatsapp = %s",
                    (identity_id,),
                )
                row = cur.fetchone()

        if row is None or row[0] is None:
            return None
        return str(row[0])

    def find_pending_document(
        self, identity_id: str, states: Sequence[str]
    ) -> StoredDocument | None:
        with _connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT bi.id, bi.documento_hash, bi.estado, bi.fecha_subida
                    FROM boletas_inscripciones bi
                    JOIN estudiantes e ON bi.id_estudiante = e.id
                    WHERE e.id_whatsapp = %s
                      AND bi.estado = ANY(%s)
                    ORDER BY bi.fecha_subida DESC
                    LIMIT 1
                    """,
                    (identity_id, list(states)),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_stored_document(row)

    def get_accepted_subjects(self, identity_id: str) -> list[SubjectKey]:
        with _connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT DISTINCT m.codigo_materia AS sigla, g.codigo_grupo AS grupo
                    FROM boleta_grupo bg
                    JOIN boletas_inscripciones bi ON bg.id_boleta = bi.id
                    JOIN estudiantes e ON bi.id_estudiante = e.id
                    JOIN grupo_materia gm ON bg.id_grupo_materia = gm.id
                    JOIN materias m ON gm.id_materia = m.id
                    JOIN grupos g ON gm.id_grupo = g.id
                    WHERE e.id_whatsapp = %s
                      AND bg.estado_agregado = %s
                    ORDER BY m.codigo_materia, g.codigo_grupo
                    """,
                    (identity_id, self.LINK_ACCEPTED_STATUS),
                )
                rows = cur.fetchall()

        return [SubjectKey(sigla=row["sigla"], grupo=row["grupo"]) for row in rows]

    def get_active_term(self) -> int | None:
        with _connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT id FROM semestres WHERE activo = true ORDER BY id DESC LIMIT 1")
                row = cur.fetchone()

        return None if row is None else int(row[0])

    def resolve_offering(self, term_id: int, sigla: str, grupo: str) -> OfferingLookup:
        """Resolve subject, section and offering in one round trip.

        The LEFT JOINs keep a row even when nothing matches, so the nulls
        tell which part of the lookup failed.
        """
        with _connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT m.id AS materia_id, m.nombre AS materia_nombre,
                           g.id AS grupo_id, gm.id AS grupo_materia_id,
                           gm.jid_grupo_whatsapp
                    FROM (SELECT 1) AS anchor
                    LEFT JOIN materias m ON m.codigo_materia = %(sigla)s
                    LEFT JOIN grupos g ON g.codigo_grupo = %(grupo)s
                    LEFT JOIN grupo_materia gm
                           ON gm.id_semestre = %(term_id)s
                          AND gm.id_materia = m.id
                          AND gm.id_grupo = g.id
                          AND gm.activo = true
                    LIMIT 1
                    """,
                    {"sigla": sigla, "grupo": grupo, "term_id": term_id},
                )
                row = cur.fetchone()

        if row is None:
            return OfferingLookup(subject_found=False, section_found=False)
        return OfferingLookup(
            subject_found=row["materia_id"] is not None,
            section_found=row["grupo_id"] is not None,
            group_materia_id=row["grupo_materia_id"],
            subject_name=row["materia_nombre"],
            group_jid=row["jid_grupo_whatsapp"],
        )

    def persist(
        self,
        parsed: ParsedDocument,
        fingerprint: str,
        mapped_subjects: Sequence[MappedSubject],
        identity_id: str,
    ) -> None:
        """Upsert student and receipt, then replace the receipt's subject links.

        Runs as a single transaction; re-persisting the same fingerprint
        rewrites the same receipt row and leaves the student's subject
        counter where the first persist put it.

        Raises:
            NoActiveTermError: if no semester is marked active.
        """
        link_ids = [
            s.group_materia_id
            for s in mapped_subjects
            if s.can_add and s.group_materia_id is not None
        ]
        with _connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO estudiantes (id_whatsapp, numero_registro, nombre_estudiante)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (id_whatsapp) DO UPDATE
                    SET numero_registro = EXCLUDED.numero_registro,
                        nombre_estudiante = EXCLUDED.nombre_estudiante
                    RETURNING id
                    """,
                    (identity_id, parsed.registration_number, parsed.student_name),
                )
                student_id = _returned_id(cur.fetchone())

                cur.execute("SELECT id FROM semestres WHERE activo = true ORDER BY id DESC LIMIT 1")
                term_row = cur.fetchone()
                if term_row is None:
                    conn.rollback()
                    raise NoActiveTermError("No active term found")

                cur.execute(
                    """
                    INSERT INTO boletas_inscripciones
                        (id_estudiante, id_semestre, documento_hash, texto_raw,
                         datos_parseados, estado)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    ON CONFLICT (documento_hash) DO UPDATE
                    SET id_estudiante = EXCLUDED.id_estudiante,
                        id_semestre = EXCLUDED.id_semestre,
                        datos_parseados = EXCLUDED.datos_parseados,
                        estado = EXCLUDED.estado,
                        procesado_en = NOW()
                    RETURNING id
                    """,
                    (
                        student_id,
                        term_row[0],
                        fingerprint,
                        "",
                        Jsonb(asdict(parsed)),
                        self.COMPLETED_STATUS,
                    ),
                )
                receipt_id = _returned_id(cur.fetchone())

                cur.execute(
                    "DELETE FROM boleta_grupo WHERE id_boleta = %s RETURNING id_grupo_materia",
                    (receipt_id,),
                )
                # The counter moves by the change in links, not by the new total.
                counter_delta = len(link_ids) - len(cur.fetchall())
                for group_materia_id in link_ids:
                    cur.execute(
                        """
                        INSERT INTO boleta_grupo (id_boleta, id_grupo_materia, estado_agregado)
                        VALUES (%s, %s, %s)
                        """,
                        (receipt_id, group_materia_id, self.LINK_PENDING_STATUS),
                    )

                if counter_delta:
                    cur.execute(
                        """
                        UPDATE estudiantes
                        SET total_materias_registradas = total_materias_registradas + %s
                        WHERE id = %s
                        """,
                        (counter_delta, student_id),
                    )
            conn.commit()


def _to_stored_document(row: dict[str, object]) -> StoredDocument:
    return StoredDocument(
        id=int(row["id"]),  # type: ignore[call-overload]
        fingerprint=str(row["documento_hash"]),
        status=str(row["estado"]),
        uploaded_at=row["fecha_subida"],  # type: ignore[arg-type]
    )


def _returned_id(row: tuple[object, ...] | None) -> int:
    if row is None:
        raise RuntimeError("INSERT ... RETURNING id returned no row")
    return int(row[0])  # type: ignore[call-overload]


@contextmanager
def _connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Borrow a pooled connection, reporting database failures as ``StoreError``."""
    try:
        with get_connection() as conn:
            yield conn
    except psycopg.Error as exc:
        raise StoreError(f"Database error: {exc}") from exc
