from dataclasses import dataclass

from adminia.config.settings import Settings
from adminia.documents.factory import Persistence, PersistenceFactory
from adminia.ingestion.orchestrator import IngestionOrchestrator, build_orchestrator
from adminia.storage.base import BaseObjectStorage
from adminia.storage.factory import ObjectStorageFactory


@dataclass
class ServiceContainer:
    """Everything the HTTP routes need, built once per process."""

    settings: Settings
    persistence: Persistence
    storage: BaseObjectStorage
    orchestrator: IngestionOrchestrator

    def close(self) -> None:
        self.persistence.close()


def build_container(settings: Settings) -> ServiceContainer:
    persistence = PersistenceFactory.create(settings)
    storage = ObjectStorageFactory.create(settings)
    return ServiceContainer(
        settings=settings,
        persistence=persistence,
        storage=storage,
        orchestrator=build_orchestrator(settings, persistence, storage),
    )
