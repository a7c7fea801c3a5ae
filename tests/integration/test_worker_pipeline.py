"""End-to-end runs of the worker over the in-memory store and local storage."""

from pathlib import Path
from unittest.mock import MagicMock

from adminia.analysis.analyzer import DocumentAnalyzer
from adminia.analysis.example_client_adapter import ExampleClientAdapter
from adminia.documents.memory import (
    InMemoryDatabase,
    InMemoryDocumentStore,
    InMemoryProcessingQueue,
)
from adminia.documents.models import DocumentStatus, NewDocument, QueueStatus
from adminia.ingestion.orchestrator import IngestionOrchestrator
from adminia.ingestion.text_extractor import DocumentTextExtractor
from adminia.pdf.pdfplumber_adapter import PdfPlumberAdapter
from adminia.storage.local_adapter import LocalObjectStorage
from adminia.worker.job_runner import JobRunner
from adminia.worker.worker import Worker


def _build(
    objects_root: Path,
) -> tuple[
    Worker, IngestionOrchestrator, InMemoryDocumentStore, InMemoryProcessingQueue, LocalObjectStorage
]:
    database = InMemoryDatabase()
    documents = InMemoryDocumentStore(database)
    queue = InMemoryProcessingQueue(database)
    storage = LocalObjectStorage(
        root=objects_root,
        public_base_url="http://localhost:8000",
        signing_secret="secret",
    )
    orchestrator = IngestionOrchestrator(
        documents=documents,
        queue=queue,
        storage=storage,
        analyzer=DocumentAnalyzer(client=ExampleClientAdapter(), model="example"),
        text_extractor=DocumentTextExtractor(PdfPlumberAdapter()),
    )
    settings = MagicMock(
        worker_poll_interval_seconds=0,
        worker_batch_size=10,
        worker_concurrency=2,
    )
    worker = Worker(queue, JobRunner(orchestrator), settings)
    return worker, orchestrator, documents, queue, storage


class TestWorkerPipeline:
    def test_drains_pdf_and_missing_object(
        self, tmp_path: Path, invoice_pdf_bytes: bytes
    ) -> None:
        worker, orchestrator, documents, queue, storage = _build(tmp_path)
        object_path = storage.write_object("uploads/report", [invoice_pdf_bytes])
        stored = orchestrator.submit(
            NewDocument(
                name="report.pdf",
                original_name="report.pdf",
                mime_type="application/pdf",
                size=len(invoice_pdf_bytes),
                object_path=object_path,
            )
        )
        missing = orchestrator.submit(
            NewDocument(
                name="lost.pdf",
                original_name="lost.pdf",
                mime_type="application/pdf",
                size=10,
                object_path="/objects/uploads/lost",
            )
        )

        worker.run(max_jobs=2)

        assert documents.get_by_id(stored.id).status is DocumentStatus.COMPLETED
        assert documents.get_by_id(stored.id).category == "other"
        assert documents.get_by_id(missing.id).status is DocumentStatus.ERROR
        assert queue.list_pending(10) == []
        statuses = {e.document_id: e.status for e in queue.list_all()}
        assert statuses == {stored.id: QueueStatus.COMPLETED, missing.id: QueueStatus.ERROR}
