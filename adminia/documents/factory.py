from dataclasses import dataclass

from adminia.config.settings import Settings
from adminia.database.connection import Database
from adminia.database.repositories.document_repository import PostgresDocumentStore
from adminia.database.repositories.queue_repository import PostgresProcessingQueue
from adminia.documents.base import BaseDocumentStore, BaseProcessingQueue
from adminia.documents.memory import (
    InMemoryDatabase,
    InMemoryDocumentStore,
    InMemoryProcessingQueue,
)


@dataclass
class Persistence:
    """A document store and a queue backed by the same database."""

    documents: BaseDocumentStore
    queue: BaseProcessingQueue
    database: Database | None = None

    def close(self) -> None:
        if self.database is not None:
            self.database.close()


class PersistenceFactory:
    """Creates the configured document store and processing queue."""

    BACKENDS = ("memory", "postgres")

    @classmethod
    def create(cls, settings: Settings) -> Persistence:
        backend = settings.store_backend.lower()
        if backend == "memory":
            shared = InMemoryDatabase()
            return Persistence(
                documents=InMemoryDocumentStore(shared),
                queue=InMemoryProcessingQueue(shared),
            )
        if backend == "postgres":
            database = Database.from_settings(settings)
            database.ensure_schema()
            return Persistence(
                documents=PostgresDocumentStore(database),
                queue=PostgresProcessingQueue(database),
                database=database,
            )
        raise ValueError(
            f"Unknown store backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
