"""Shared FastAPI dependencies."""

from fastapi import Depends, Request

from adminia.api.container import ServiceContainer
from adminia.documents.base import BaseDocumentStore, BaseProcessingQueue
from adminia.ingestion.orchestrator import IngestionOrchestrator
from adminia.storage.base import BaseObjectStorage


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_orchestrator(
    container: ServiceContainer = Depends(get_container),
) -> IngestionOrchestrator:
    return container.orchestrator


def get_documents(container: ServiceContainer = Depends(get_container)) -> BaseDocumentStore:
    return container.persistence.documents


def get_queue(container: ServiceContainer = Depends(get_container)) -> BaseProcessingQueue:
    return container.persistence.queue


def get_storage(container: ServiceContainer = Depends(get_container)) -> BaseObjectStorage:
    return container.storage
