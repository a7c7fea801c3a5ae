import os
from collections.abc import Generator

import pytest

from adminia.config.settings import Settings
from adminia.database.connection import Database
from adminia.database.repositories.document_repository import PostgresDocumentStore
from adminia.database.repositories.queue_repository import PostgresProcessingQueue
from adminia.documents.models import NewDocument


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return Settings(db_database=os.environ.get("DB_DATABASE", "adminia_test"))


@pytest.fixture(scope="session")
def database(test_settings: Settings) -> Generator[Database, None, None]:
    try:
        db = Database.from_settings(test_settings)
        db.ensure_schema()
    except Exception as e:
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clean_database(database: Database) -> Database:
    with database.connection() as conn:
        conn.execute("DELETE FROM ai_processing_queue")
        conn.execute("DELETE FROM documents")
        conn.commit()
    return database


@pytest.fixture
def document_store(clean_database: Database) -> PostgresDocumentStore:
    return PostgresDocumentStore(clean_database)


@pytest.fixture
def processing_queue(clean_database: Database) -> PostgresProcessingQueue:
    return PostgresProcessingQueue(clean_database)


@pytest.fixture
def new_document() -> NewDocument:
    return NewDocument(
        name="invoice.pdf",
        original_name="invoice.pdf",
        mime_type="application/pdf",
        size=12000,
        object_path="/objects/abc123",
    )
