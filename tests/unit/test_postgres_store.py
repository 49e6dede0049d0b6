from unittest.mock import MagicMock, patch

import psycopg
import pytest

from enrollment_ingest.database.repositories.enrollment_repository import PostgresEnrollmentStore
from enrollment_ingest.parsing.models import ParsedDocument, SubjectRecord
from enrollment_ingest.store.exceptions import NoActiveTermError, StoreError
from enrollment_ingest.validation.models import MappedSubject

_GET_CONNECTION = "enrollment_ingest.database.repositories.enrollment_repository.get_connection"


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


def _make_parsed() -> ParsedDocument:
    return ParsedDocument(
        is_valid=True,
        registration_number="223456789",
        student_name="Juan Perez Lopez",
        subjects=(SubjectRecord(sigla="INF412", grupo="SA", materia="PROGRAMACION III"),),
    )


def _mapped(group_materia_id: int) -> MappedSubject:
    return MappedSubject(
        subject=SubjectRecord(sigla="INF412", grupo="SA", materia="PROGRAMACION III"),
        can_add=True,
        group_materia_id=group_materia_id,
    )


def _counter_updates(mock_cursor: MagicMock) -> list[tuple[object, ...]]:
    return [
        c.args[1]
        for c in mock_cursor.execute.call_args_list
        if "total_materias_registradas" in c.args[0]
    ]


class TestDatabaseErrors:
    @patch(_GET_CONNECTION)
    def test_query_failure_becomes_store_error(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg.OperationalError("server closed the connection")

        with pytest.raises(StoreError, match="server closed the connection"):
            PostgresEnrollmentStore().find_document_by_fingerprint("a" * 64)

    @patch(_GET_CONNECTION)
    def test_checkout_failure_becomes_store_error(self, mock_get_conn: MagicMock) -> None:
        mock_get_conn.side_effect = psycopg.OperationalError("connection refused")

        with pytest.raises(StoreError, match="connection refused"):
            PostgresEnrollmentStore().get_active_term()

    @patch(_GET_CONNECTION)
    def test_missing_active_term_is_not_rewrapped(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [(3,), None]

        with pytest.raises(NoActiveTermError):
            PostgresEnrollmentStore().persist(_make_parsed(), "a" * 64, [], "x@c.us")


class TestPersistCounter:
    @patch(_GET_CONNECTION)
    def test_first_persist_adds_new_links(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [(3,), (1,), (5,)]
        mock_cursor.fetchall.return_value = []

        PostgresEnrollmentStore().persist(_make_parsed(), "a" * 64, [_mapped(11)], "x@c.us")

        assert _counter_updates(mock_cursor) == [(1, 3)]
        mock_conn.commit.assert_called_once()

    @patch(_GET_CONNECTION)
    def test_repersisting_same_links_leaves_counter(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [(3,), (1,), (5,)]
        mock_cursor.fetchall.return_value = [(11,)]

        PostgresEnrollmentStore().persist(_make_parsed(), "a" * 64, [_mapped(11)], "x@c.us")

        assert _counter_updates(mock_cursor) == []

    @patch(_GET_CONNECTION)
    def test_repersisting_with_fewer_links_lowers_counter(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.side_effect = [(3,), (1,), (5,)]
        mock_cursor.fetchall.return_value = [(11,), (12,)]

        PostgresEnrollmentStore().persist(_make_parsed(), "a" * 64, [_mapped(11)], "x@c.us")

        assert _counter_updates(mock_cursor) == [(-1, 3)]
