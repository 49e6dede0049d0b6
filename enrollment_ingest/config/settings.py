from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    store_backend: str = "postgres"
    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "boletas"
    db_username: str = "boletas"
    db_password: str = "secret"
    db_pool_max_size: int = 10
    db_pool_timeout_seconds: float = 30.0
    db_application_name: str = "enrollment-ingest"

    pdf_engine: str = "pdfplumber"

    openai_api_key: str = ""
    openai_model_name: str = "gpt-4o-mini"
    openai_timeout_seconds: int = 60
    openai_max_tokens: int = 1500

    ocr_space_api_key: str = ""
    ocr_space_url: str = "https://api.ocr.space/parse/image"
    ocr_space_engine: int = 3
    ocr_space_timeout_seconds: int = 60

    tesseract_cmd: str = ""
    tesseract_lang: str = "spa"
    tesseract_min_chars: int = 10
    tesseract_pdf_dpi: int = 300

    max_subjects_per_student: int = 8
    pending_document_states: list[str] = ["pendiente", "confirmado", "procesando"]
    identity_template: str = "test_{registration_number}@c.us"

    default_process_mode: Literal["sequential", "parallel", "batch"] = "parallel"
    batch_size: int = 10
