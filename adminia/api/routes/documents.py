"""Document intake and analysis routes."""

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse

from adminia.api import schemas
from adminia.api.dependencies import get_documents, get_orchestrator, get_storage
from adminia.api.errors import error_response
from adminia.documents.base import BaseDocumentStore
from adminia.ingestion.orchestrator import IngestionOrchestrator
from adminia.storage.base import BaseObjectStorage

router = APIRouter()


@router.post("/upload-url", response_model=schemas.UploadUrlResponse)
def create_upload_url(
    storage: BaseObjectStorage = Depends(get_storage),
) -> schemas.UploadUrlResponse:
    """Issue a signed, write-once URL the client uploads the file bytes to."""
    return schemas.UploadUrlResponse(upload_url=storage.issue_upload_url())


@router.post(
    "",
    response_model=schemas.DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_document(
    payload: schemas.DocumentCreate,
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> schemas.DocumentResponse:
    """Register an uploaded file and queue it for analysis."""
    document = orchestrator.submit(payload.to_new_document())
    return schemas.DocumentResponse.from_document(document)


@router.get("", response_model=list[schemas.DocumentResponse])
def list_documents(
    category: str | None = None,
    documents: BaseDocumentStore = Depends(get_documents),
) -> list[schemas.DocumentResponse]:
    """Return all documents, newest first, optionally restricted to one category."""
    found = documents.list_by_category(category) if category else documents.list_all()
    return [schemas.DocumentResponse.from_document(d) for d in found]


@router.get("/recent", response_model=list[schemas.DocumentResponse])
def list_recent_documents(
    limit: int = Query(default=10, ge=0, le=100),
    documents: BaseDocumentStore = Depends(get_documents),
) -> list[schemas.DocumentResponse]:
    return [schemas.DocumentResponse.from_document(d) for d in documents.list_recent(limit)]


@router.get("/{document_id}", response_model=schemas.DocumentResponse)
def get_document(
    document_id: str,
    documents: BaseDocumentStore = Depends(get_documents),
) -> schemas.DocumentResponse:
    return schemas.DocumentResponse.from_document(documents.get_by_id(document_id))


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    document_id: str,
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> Response:
    orchestrator.delete(document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{document_id}/analyze",
    response_model=schemas.AnalysisResponse,
    responses={500: {"description": "Analysis failed and was recorded on the document"}},
)
def analyze_document(
    document_id: str,
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> schemas.AnalysisResponse | JSONResponse:
    """Run the analysis now and return its result.

    A failed analysis still leaves the document in `error`, which the response reports.
    """
    outcome = orchestrator.analyze(document_id)
    if outcome.analysis is None or not outcome.succeeded:
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            outcome.error or "Document analysis failed",
        )
    return schemas.AnalysisResponse.from_result(outcome.analysis)


@router.post("/{document_id}/resubmit", response_model=schemas.DocumentResponse)
def resubmit_document(
    document_id: str,
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> schemas.DocumentResponse:
    """Discard the current attempt and queue the document again."""
    return schemas.DocumentResponse.from_document(orchestrator.resubmit(document_id))
