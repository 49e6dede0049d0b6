import pytest
from pydantic import ValidationError

from enrollment_ingest.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_pdf_engine(self) -> None:
        s = Settings()
        assert s.pdf_engine == "pdfplumber"

    def test_default_subject_quota(self) -> None:
        s = Settings()
        assert s.max_subjects_per_student == 8

    def test_default_pending_states(self) -> None:
        s = Settings()
        assert s.pending_document_states == ["pendiente", "confirmado", "procesando"]

    def test_default_identity_template(self) -> None:
        s = Settings()
        assert s.identity_template.format(registration_number="223456789") == (
            "test_223456789@c.us"
        )

    def test_default_process_mode(self) -> None:
        s = Settings()
        assert s.default_process_mode == "parallel"
        assert s.batch_size == 10


class TestSettingsFromEnv:
    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_db_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST", "db.example.com")
        s = Settings()
        assert s.db_host == "db.example.com"

    def test_loads_store_backend(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORE_BACKEND", "memory")
        s = Settings()
        assert s.store_backend == "memory"

    def test_loads_quota(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_SUBJECTS_PER_STUDENT", "6")
        s = Settings()
        assert s.max_subjects_per_student == 6

    def test_loads_pending_states_as_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PENDING_DOCUMENT_STATES", '["pendiente"]')
        s = Settings()
        assert s.pending_document_states == ["pendiente"]

    def test_loads_ocr_space_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OCR_SPACE_API_KEY", "K123")
        s = Settings()
        assert s.ocr_space_api_key == "K123"


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_batch_size_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BATCH_SIZE", "abc")
        with pytest.raises(ValidationError):
            Settings()

    def test_unknown_process_mode_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEFAULT_PROCESS_MODE", "turbo")
        with pytest.raises(ValidationError):
            Settings()

    def test_loads_process_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEFAULT_PROCESS_MODE", "batch")
        s = Settings()
        assert s.default_process_mode == "batch"
