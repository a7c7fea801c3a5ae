import base64
from dataclasses import replace

from adminia.analysis.base import BaseDocumentAnalyzer
from adminia.analysis.factory import AnalyzerFactory
from adminia.analysis.models import AnalysisResult
from adminia.config.settings import Settings
from adminia.documents.base import BaseDocumentStore, BaseProcessingQueue
from adminia.documents.exceptions import (
    DocumentNotFoundError,
    QueueEntryNotFoundError,
    QueueEntryNotPendingError,
)
from adminia.documents.factory import Persistence
from adminia.documents.models import (
    Document,
    DocumentStatus,
    NewDocument,
    QueueEntry,
    QueueStatus,
)
from adminia.documents.validator import validate_new_document
from adminia.exceptions import AdminiaError, ConflictActiveAnalysisError
from adminia.ingestion.models import IngestionOutcome
from adminia.ingestion.text_extractor import DocumentTextExtractor
from adminia.logging.logger import Log
from adminia.pdf.factory import PdfExtractorFactory
from adminia.storage.base import BaseObjectStorage
from adminia.storage.factory import ObjectStorageFactory

ANALYZABLE_STATUSES = (
    DocumentStatus.PENDING,
    DocumentStatus.COMPLETED,
    DocumentStatus.ERROR,
)
SUPERSEDED_MESSAGE = "Superseded by re-submit"

_CLEARED_ANALYSIS = {"category": None, "ai_analysis": None, "extracted_data": None}


class IngestionOrchestrator:
    """Drives a document from submission to a terminal analysis state.

    Only the orchestrator mutates documents and queue entries after creation.
    Every analysis attempt ends with the document `completed` or `error`.
    """

    def __init__(
        self,
        *,
        documents: BaseDocumentStore,
        queue: BaseProcessingQueue,
        storage: BaseObjectStorage,
        analyzer: BaseDocumentAnalyzer,
        text_extractor: DocumentTextExtractor,
    ) -> None:
        self._documents = documents
        self._queue = queue
        self._storage = storage
        self._analyzer = analyzer
        self._text_extractor = text_extractor

    def submit(self, new_document: NewDocument) -> Document:
        """Register an uploaded object as a pending document with a pending queue entry.

        Raises:
            InvalidInputError: if the metadata or the object path is invalid.
        """
        validated = validate_new_document(new_document)
        object_path = self._storage.normalize_path(validated.object_path)
        document = self._documents.create(replace(validated, object_path=object_path))
        entry = self._queue.enqueue(document.id)
        Log.info(
            f"Submitted document {document.id} ({document.mime_type}, {document.size} bytes), "
            f"queue entry {entry.id if entry else 'already active'}"
        )
        return document

    def analyze(self, document_id: str) -> IngestionOutcome:
        """Run one analysis attempt and record its result.

        Analysis failures are recorded on the document and the queue entry and
        returned as a failed outcome.

        Raises:
            DocumentNotFoundError: if the document does not exist.
            ConflictActiveAnalysisError: if the document is already being analyzed.
        """
        claimed = self._claim_document(document_id)
        try:
            entry = self._start_attempt(document_id)
        except Exception:
            self._release_document(document_id)
            raise
        return self._run_attempt(claimed, entry)

    def analyze_entry(self, entry: QueueEntry) -> IngestionOutcome:
        """Run the attempt behind one pending queue entry.

        The entry is claimed before the document, so an entry that another
        attempt already picked up or finished is never analyzed twice.

        Raises:
            QueueEntryNotPendingError: if the entry is no longer pending.
            DocumentNotFoundError: if the document does not exist.
            ConflictActiveAnalysisError: if the document is already being analyzed.
        """
        claimed_entry = self._queue.claim(entry.id)
        if claimed_entry is None:
            raise QueueEntryNotPendingError(f"Queue entry {entry.id} is no longer pending")
        claimed = self._claim_document(claimed_entry.document_id)
        return self._run_attempt(claimed, claimed_entry)

    def delete(self, document_id: str) -> None:
        """Remove a document and its queue entries, whatever its state.

        Raises:
            DocumentNotFoundError: if the document does not exist.
        """
        self._documents.delete(document_id)
        Log.info(f"Deleted document {document_id}")

    def resubmit(self, document_id: str) -> Document:
        """Force a new attempt: close active entries, reset to pending, enqueue again."""
        self._documents.get_by_id(document_id)
        for entry in self._queue.list_for_document(document_id):
            if entry.is_active:
                self._queue.update(
                    entry.id, {"status": QueueStatus.ERROR, "error": SUPERSEDED_MESSAGE}
                )
        document = self._documents.update(
            document_id, {"status": DocumentStatus.PENDING, **_CLEARED_ANALYSIS}
        )
        self._queue.enqueue(document_id)
        Log.info(f"Re-submitted document {document_id}")
        return document

    def _claim_document(self, document_id: str) -> Document:
        claimed = self._documents.transition_status(
            document_id,
            from_statuses=ANALYZABLE_STATUSES,
            to_status=DocumentStatus.PROCESSING,
            changes=_CLEARED_ANALYSIS,
        )
        if claimed is None:
            raise ConflictActiveAnalysisError(
                f"Document {document_id} already has an analysis in progress"
            )
        Log.info(f"Analyzing document {document_id}")
        return claimed

    def _release_document(self, document_id: str) -> None:
        try:
            self._documents.transition_status(
                document_id,
                from_statuses=(DocumentStatus.PROCESSING,),
                to_status=DocumentStatus.ERROR,
            )
        except DocumentNotFoundError:
            Log.warning(f"Document {document_id} was deleted before its attempt started")

    def _run_attempt(self, document: Document, entry: QueueEntry) -> IngestionOutcome:
        try:
            result = self._run_analysis(document)
        except AdminiaError as exc:
            return self._fail(document.id, entry, _error_message(exc))
        except Exception as exc:
            Log.exception(f"Unexpected error while analyzing document {document.id}")
            self._fail(document.id, entry, f"Unexpected error: {_error_message(exc)}")
            raise
        return self._complete(document.id, entry, result)

    def _start_attempt(self, document_id: str) -> QueueEntry:
        entry = self._queue.find_active(document_id) or self._queue.enqueue(document_id)
        if entry is None:
            entry = self._queue.find_active(document_id)
        if entry is None:
            raise QueueEntryNotFoundError(f"No queue entry for document {document_id}")
        return self._queue.update(entry.id, {"status": QueueStatus.PROCESSING})

    def _run_analysis(self, document: Document) -> AnalysisResult:
        content = self._storage.read_bytes(document.object_path)
        Log.debug(f"Read {len(content)} bytes of document {document.id}")
        if document.is_image:
            image_base64 = base64.b64encode(content).decode("ascii")
            text = self._analyzer.extract_text(image_base64, document.mime_type)
            return self._analyzer.analyze(
                text=text or None,
                image_base64=image_base64,
                image_mime_type=document.mime_type,
            )
        text = self._text_extractor.extract(document, content)
        return self._analyzer.analyze(text=text)

    def _complete(
        self, document_id: str, entry: QueueEntry, result: AnalysisResult
    ) -> IngestionOutcome:
        analysis = result.to_dict()
        document = self._documents.transition_status(
            document_id,
            from_statuses=(DocumentStatus.PROCESSING,),
            to_status=DocumentStatus.COMPLETED,
            changes={
                "category": result.category,
                "ai_analysis": analysis,
                "extracted_data": dict(result.extracted_data),
            },
        )
        if document is None:
            return self._superseded(document_id, entry)
        entry = self._queue.update(
            entry.id, {"status": QueueStatus.COMPLETED, "result": analysis, "error": None}
        )
        Log.info(f"Document {document_id} completed as {result.category}")
        return IngestionOutcome(document=document, queue_entry=entry, analysis=result)

    def _fail(self, document_id: str, entry: QueueEntry, message: str) -> IngestionOutcome:
        Log.error(f"Analysis of document {document_id} failed: {message}")
        document = self._documents.transition_status(
            document_id,
            from_statuses=(DocumentStatus.PROCESSING,),
            to_status=DocumentStatus.ERROR,
        )
        if document is None:
            return self._superseded(document_id, entry)
        entry = self._queue.update(
            entry.id, {"status": QueueStatus.ERROR, "result": None, "error": message}
        )
        return IngestionOutcome(document=document, queue_entry=entry, error=message)

    def _superseded(self, document_id: str, entry: QueueEntry) -> IngestionOutcome:
        """The document was re-submitted while this attempt was running."""
        Log.warning(f"Analysis of document {document_id} was superseded, discarding result")
        current_entry = next(
            (e for e in self._queue.list_for_document(document_id) if e.id == entry.id),
            entry,
        )
        return IngestionOutcome(
            document=self._documents.get_by_id(document_id),
            queue_entry=current_entry,
            error=SUPERSEDED_MESSAGE,
        )


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def build_orchestrator(
    settings: Settings,
    persistence: Persistence,
    storage: BaseObjectStorage | None = None,
) -> IngestionOrchestrator:
    """Build an IngestionOrchestrator with the adapters selected in settings."""
    return IngestionOrchestrator(
        documents=persistence.documents,
        queue=persistence.queue,
        storage=storage if storage is not None else ObjectStorageFactory.create(settings),
        analyzer=AnalyzerFactory.create(settings),
        text_extractor=DocumentTextExtractor(PdfExtractorFactory.create(settings)),
    )
