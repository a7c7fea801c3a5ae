from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "adminia"
    db_username: str = "adminia"
    db_password: str = "secret"

    store_backend: str = "memory"

    storage_backend: str = "local"
    storage_root: str = "/app/objects"
    storage_public_base_url: str = "http://localhost:8000"
    storage_signing_secret: str = "change-me"
    upload_url_ttl_seconds: int = 900

    analysis_provider: str = "openai"
    analysis_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("analysis_api_key", "openai_api_key"),
        repr=False,
    )
    analysis_model_name: str = "gpt-4o"
    analysis_base_url: str = ""
    analysis_timeout_seconds: int = 60
    analysis_max_tokens: int = 1000
    analysis_temperature: float = 0.0

    pdf_engine: str = "pdfplumber"

    worker_poll_interval_seconds: int = 5
    worker_batch_size: int = 10
    worker_concurrency: int = 4

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api"
