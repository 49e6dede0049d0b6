import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from enrollment_ingest.config.settings import Settings
from enrollment_ingest.database.connection import close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "boletas_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute("SELECT 1")
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run these tests.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def active_term(db_conn: psycopg.Connection[Any]) -> int:
    with db_conn.cursor() as cur:
        cur.execute("SELECT id FROM semestres WHERE activo = true ORDER BY id DESC LIMIT 1")
        row = cur.fetchone()
    if row is None:
        pytest.skip("No active semestre in DB for integration test setup")
    return int(row[0])


@pytest.fixture
def identity_id(db_conn: psycopg.Connection[Any]) -> Generator[str, None, None]:
    """A fresh identity whose student and receipts are removed afterwards."""
    identity = f"it_{uuid.uuid4().hex[:12]}@c.us"
    yield identity
    with db_conn.cursor() as cur:
        cur.execute(
            """
            DELETE FROM boleta_grupo WHERE id_boleta IN (
                SELECT bi.id FROM boletas_inscripciones bi
                JOIN estudiantes e ON bi.id_estudiante = e.id
                WHERE e.id_whatsapp = %s
            )
            """,
            (identity,),
        )
        cur.execute(
            """
            DELETE FROM boletas_inscripciones WHERE id_estudiante IN (
                SELECT id FROM estudiantes WHERE id_whatsapp = %s
            )
            """,
            (identity,),
        )
        cur.execute("DELETE FROM estudiantes WHERE id_whatsapp = %s", (identity,))
    db_conn.commit()
