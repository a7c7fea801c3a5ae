"""Reference data, dashboard counters and the queue view."""

from fastapi import APIRouter, Depends

from adminia.api import schemas
from adminia.api.dependencies import get_documents, get_queue
from adminia.documents.base import BaseDocumentStore, BaseProcessingQueue
from adminia.documents.categories import CATEGORIES

router = APIRouter()


@router.get("/categories", response_model=list[schemas.CategoryResponse])
def list_categories() -> list[schemas.CategoryResponse]:
    return [schemas.CategoryResponse.from_category(c) for c in CATEGORIES]


@router.get("/statistics", response_model=schemas.StatisticsResponse)
def get_statistics(
    documents: BaseDocumentStore = Depends(get_documents),
) -> schemas.StatisticsResponse:
    return schemas.StatisticsResponse.from_statistics(documents.statistics())


@router.get("/ai-queue", response_model=list[schemas.QueueEntryResponse])
def list_queue(
    queue: BaseProcessingQueue = Depends(get_queue),
) -> list[schemas.QueueEntryResponse]:
    """Every analysis attempt, oldest first."""
    return [schemas.QueueEntryResponse.from_entry(e) for e in queue.list_all()]
