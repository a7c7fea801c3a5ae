import base64
from dataclasses import dataclass
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from adminia.analysis.exceptions import AnalysisNetworkError
from adminia.analysis.models import AnalysisResult
from adminia.documents.exceptions import DocumentNotFoundError, QueueEntryNotPendingError
from adminia.documents.memory import (
    InMemoryDatabase,
    InMemoryDocumentStore,
    InMemoryProcessingQueue,
)
from adminia.documents.models import DocumentStatus, NewDocument, QueueStatus
from adminia.exceptions import ConflictActiveAnalysisError, InvalidInputError
from adminia.ingestion.orchestrator import SUPERSEDED_MESSAGE, IngestionOrchestrator
from adminia.ingestion.text_extractor import DocumentTextExtractor
from adminia.storage.local_adapter import LocalObjectStorage

BASE_URL = "http://localhost:8000"

RESULT = AnalysisResult(
    category="invoices",
    confidence=0.92,
    extracted_data={"amount": "120.00 EUR"},
    summary="Electricity bill",
    key_information=["Due April 1st"],
    document_type="Electricity bill",
)


@dataclass
class Harness:
    orchestrator: IngestionOrchestrator
    documents: InMemoryDocumentStore
    queue: InMemoryProcessingQueue
    storage: LocalObjectStorage
    analyzer: MagicMock
    pdf_extractor: MagicMock


def _make_harness(tmp_path: Path) -> Harness:
    database = InMemoryDatabase()
    documents = InMemoryDocumentStore(database)
    queue = InMemoryProcessingQueue(database)
    storage = LocalObjectStorage(root=tmp_path, public_base_url=BASE_URL, signing_secret="s")
    analyzer = MagicMock()
    analyzer.analyze.return_value = RESULT
    analyzer.extract_text.return_value = "INVOICE total 120 EUR"
    pdf_extractor = MagicMock()
    pdf_extractor.extract.return_value = "Invoice #42 total 120 EUR"
    orchestrator = IngestionOrchestrator(
        documents=documents,
        queue=queue,
        storage=storage,
        analyzer=analyzer,
        text_extractor=DocumentTextExtractor(pdf_extractor),
    )
    return Harness(orchestrator, documents, queue, storage, analyzer, pdf_extractor)


def _new_document(
    object_path: str = "/objects/abc123",
    mime_type: str = "application/pdf",
    name: str = "invoice.pdf",
) -> NewDocument:
    return NewDocument(
        name=name,
        original_name=name,
        mime_type=mime_type,
        size=12000,
        object_path=object_path,
    )


def _submit_stored(
    harness: Harness,
    content: bytes = b"%PDF-1.4 fake",
    mime_type: str = "application/pdf",
    key: str = "uploads/abc",
) -> str:
    object_path = harness.storage.write_object(key, [content])
    document = harness.orchestrator.submit(_new_document(object_path, mime_type))
    return document.id


class TestSubmit:
    def test_creates_pending_document_and_queue_entry(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document = harness.orchestrator.submit(_new_document())

        assert document.status is DocumentStatus.PENDING
        assert document.object_path == "/objects/abc123"
        assert document.category is None
        entries = harness.queue.list_all()
        assert len(entries) == 1
        assert entries[0].document_id == document.id
        assert entries[0].status is QueueStatus.PENDING

    def test_normalizes_signed_upload_url(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        url = f"{BASE_URL}/objects/uploads/abc?expires=1&signature=x"
        document = harness.orchestrator.submit(_new_document(object_path=url))
        assert document.object_path == "/objects/uploads/abc"

    def test_stores_canonical_metadata(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        submitted = _new_document(mime_type="Application/PDF", name=" invoice.pdf ")

        document = harness.orchestrator.submit(submitted)

        stored = harness.documents.get_by_id(document.id)
        assert stored == document
        assert stored.mime_type == "application/pdf"
        assert stored.name == "invoice.pdf"

    def test_rejects_invalid_metadata(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        with pytest.raises(InvalidInputError):
            harness.orchestrator.submit(_new_document(mime_type="application/x-msdownload"))
        assert harness.documents.list_all() == []
        assert harness.queue.list_all() == []


class TestAnalyzeSuccess:
    def test_completes_document_and_entry(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)

        outcome = harness.orchestrator.analyze(document_id)

        assert outcome.succeeded
        assert outcome.analysis == RESULT
        document = harness.documents.get_by_id(document_id)
        assert document.status is DocumentStatus.COMPLETED
        assert document.category == "invoices"
        assert document.ai_analysis == RESULT.to_dict()
        assert document.extracted_data == {"amount": "120.00 EUR"}
        entries = harness.queue.list_for_document(document_id)
        assert len(entries) == 1
        assert entries[0].status is QueueStatus.COMPLETED
        assert entries[0].result == RESULT.to_dict()
        assert entries[0].error is None

    def test_pdf_text_is_analyzed(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness, content=b"%PDF bytes")

        harness.orchestrator.analyze(document_id)

        harness.pdf_extractor.extract.assert_called_once_with(b"%PDF bytes")
        harness.analyzer.analyze.assert_called_once_with(text="Invoice #42 total 120 EUR")

    def test_image_is_transcribed_then_analyzed(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness, content=b"\x89PNG", mime_type="image/png")
        expected_base64 = base64.b64encode(b"\x89PNG").decode("ascii")

        harness.orchestrator.analyze(document_id)

        harness.analyzer.extract_text.assert_called_once_with(expected_base64, "image/png")
        harness.analyzer.analyze.assert_called_once_with(
            text="INVOICE total 120 EUR",
            image_base64=expected_base64,
            image_mime_type="image/png",
        )

    def test_image_without_text_is_analyzed_from_image_only(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        harness.analyzer.extract_text.return_value = ""
        document_id = _submit_stored(harness, content=b"\x89PNG", mime_type="image/png")

        harness.orchestrator.analyze(document_id)

        assert harness.analyzer.analyze.call_args.kwargs["text"] is None

    def test_document_is_processing_while_analyzing(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)
        seen: dict[str, object] = {}

        def record_state(**_kwargs: object) -> AnalysisResult:
            document = harness.documents.get_by_id(document_id)
            entry = harness.queue.find_active(document_id)
            seen["status"] = document.status
            seen["entry_status"] = entry.status if entry else None
            return RESULT

        harness.analyzer.analyze.side_effect = record_state
        harness.orchestrator.analyze(document_id)

        assert seen == {
            "status": DocumentStatus.PROCESSING,
            "entry_status": QueueStatus.PROCESSING,
        }

    def test_reanalysis_is_a_new_attempt(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)
        harness.orchestrator.analyze(document_id)
        seen: dict[str, object] = {}

        def record_state(**_kwargs: object) -> AnalysisResult:
            document = harness.documents.get_by_id(document_id)
            seen["category"] = document.category
            seen["ai_analysis"] = document.ai_analysis
            return RESULT

        harness.analyzer.analyze.side_effect = record_state
        outcome = harness.orchestrator.analyze(document_id)

        assert outcome.succeeded
        assert seen == {"category": None, "ai_analysis": None}
        statuses = [e.status for e in harness.queue.list_for_document(document_id)]
        assert statuses == [QueueStatus.COMPLETED, QueueStatus.COMPLETED]

    def test_counts_in_statistics(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        harness.orchestrator.analyze(_submit_stored(harness))
        stats = harness.documents.statistics()
        assert stats.processed_today == 1
        assert stats.pending_analysis == 0
        assert stats.category_counts == {"invoices": 1}


class TestAnalyzeFailure:
    def test_missing_object_records_error(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document = harness.orchestrator.submit(_new_document("/objects/missing"))

        outcome = harness.orchestrator.analyze(document.id)

        assert not outcome.succeeded
        assert outcome.error
        stored = harness.documents.get_by_id(document.id)
        assert stored.status is DocumentStatus.ERROR
        assert stored.ai_analysis is None and stored.category is None
        entry = harness.queue.list_for_document(document.id)[0]
        assert entry.status is QueueStatus.ERROR
        assert entry.error
        harness.analyzer.analyze.assert_not_called()

    def test_analysis_failure_records_error(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        harness.analyzer.analyze.side_effect = AnalysisNetworkError("AI provider network error")
        document_id = _submit_stored(harness)

        outcome = harness.orchestrator.analyze(document_id)

        assert outcome.error == "AI provider network error"
        assert outcome.document.status is DocumentStatus.ERROR
        assert outcome.queue_entry.status is QueueStatus.ERROR
        assert outcome.queue_entry.error == "AI provider network error"

    def test_failure_after_success_clears_previous_analysis(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)
        harness.orchestrator.analyze(document_id)
        harness.analyzer.analyze.side_effect = AnalysisNetworkError("down")

        harness.orchestrator.analyze(document_id)

        document = harness.documents.get_by_id(document_id)
        assert document.status is DocumentStatus.ERROR
        assert document.category is None
        assert document.extracted_data is None

    def test_unexpected_error_is_recorded_and_reraised(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        harness.analyzer.analyze.side_effect = RuntimeError("bug")
        document_id = _submit_stored(harness)

        with pytest.raises(RuntimeError, match="bug"):
            harness.orchestrator.analyze(document_id)

        assert harness.documents.get_by_id(document_id).status is DocumentStatus.ERROR
        entry = harness.queue.list_for_document(document_id)[0]
        assert entry.status is QueueStatus.ERROR
        assert entry.error == "Unexpected error: bug"

    def test_errored_document_can_be_analyzed_again(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        harness.analyzer.analyze.side_effect = [AnalysisNetworkError("down"), RESULT]
        document_id = _submit_stored(harness)

        assert not harness.orchestrator.analyze(document_id).succeeded
        assert harness.orchestrator.analyze(document_id).succeeded


class TestAnalyzePreconditions:
    def test_unknown_document_raises(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        with pytest.raises(DocumentNotFoundError):
            harness.orchestrator.analyze("missing")

    def test_processing_document_conflicts_without_mutation(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)
        harness.documents.update(document_id, {"status": DocumentStatus.PROCESSING})
        before = harness.documents.get_by_id(document_id)
        entries_before = harness.queue.list_for_document(document_id)

        with pytest.raises(ConflictActiveAnalysisError):
            harness.orchestrator.analyze(document_id)

        assert harness.documents.get_by_id(document_id) == before
        assert harness.queue.list_for_document(document_id) == entries_before
        harness.analyzer.analyze.assert_not_called()


class TestAnalyzeEntry:
    def test_runs_the_claimed_entry(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)
        [entry] = harness.queue.list_pending(10)

        outcome = harness.orchestrator.analyze_entry(entry)

        assert outcome.succeeded
        assert outcome.queue_entry.id == entry.id
        assert outcome.queue_entry.status is QueueStatus.COMPLETED
        assert harness.documents.get_by_id(document_id).status is DocumentStatus.COMPLETED
        assert len(harness.queue.list_for_document(document_id)) == 1

    def test_finished_entry_is_not_analyzed_again(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)
        [stale] = harness.queue.list_pending(10)
        harness.orchestrator.analyze(document_id)
        completed = harness.documents.get_by_id(document_id)

        with pytest.raises(QueueEntryNotPendingError):
            harness.orchestrator.analyze_entry(stale)

        assert harness.analyzer.analyze.call_count == 1
        assert harness.documents.get_by_id(document_id) == completed
        assert len(harness.queue.list_for_document(document_id)) == 1

    def test_entry_of_deleted_document_is_skipped(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)
        [entry] = harness.queue.list_pending(10)
        harness.orchestrator.delete(document_id)

        with pytest.raises(QueueEntryNotPendingError):
            harness.orchestrator.analyze_entry(entry)
        harness.analyzer.analyze.assert_not_called()


class TestDeleteDuringAnalysis:
    def test_delete_before_attempt_starts_leaves_no_queue_entry(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)

        def delete_then_find(doc_id: str) -> None:
            harness.documents.delete(doc_id)
            return None

        harness.queue.find_active = MagicMock(side_effect=delete_then_find)  # type: ignore[method-assign]

        with pytest.raises(DocumentNotFoundError):
            harness.orchestrator.analyze(document_id)

        assert harness.queue.list_all() == []
        assert harness.documents.statistics().pending_analysis == 0


class TestDelete:
    def test_removes_document_and_queue_entries(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)
        harness.orchestrator.analyze(document_id)

        harness.orchestrator.delete(document_id)

        with pytest.raises(DocumentNotFoundError):
            harness.documents.get_by_id(document_id)
        assert harness.queue.list_for_document(document_id) == []

    def test_unknown_document_raises(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentNotFoundError):
            _make_harness(tmp_path).orchestrator.delete("missing")


class TestResubmit:
    def test_resets_stuck_processing_document(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)
        entry = harness.queue.find_active(document_id)
        assert entry is not None
        harness.documents.update(document_id, {"status": DocumentStatus.PROCESSING})
        harness.queue.update(entry.id, {"status": QueueStatus.PROCESSING})

        document = harness.orchestrator.resubmit(document_id)

        assert document.status is DocumentStatus.PENDING
        entries = harness.queue.list_for_document(document_id)
        assert [e.status for e in entries] == [QueueStatus.ERROR, QueueStatus.PENDING]
        assert entries[0].error == SUPERSEDED_MESSAGE

    def test_clears_completed_analysis(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)
        harness.orchestrator.analyze(document_id)

        document = harness.orchestrator.resubmit(document_id)

        assert document.category is None
        assert document.ai_analysis is None
        assert harness.queue.find_active(document_id) is not None

    def test_running_attempt_is_discarded(self, tmp_path: Path) -> None:
        harness = _make_harness(tmp_path)
        document_id = _submit_stored(harness)

        def resubmit_midway(**_kwargs: object) -> AnalysisResult:
            harness.orchestrator.resubmit(document_id)
            return RESULT

        harness.analyzer.analyze.side_effect = resubmit_midway
        outcome = harness.orchestrator.analyze(document_id)

        assert outcome.error == SUPERSEDED_MESSAGE
        assert outcome.queue_entry.status is QueueStatus.ERROR
        assert harness.documents.get_by_id(document_id).status is DocumentStatus.PENDING

    def test_unknown_document_raises(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentNotFoundError):
            _make_harness(tmp_path).orchestrator.resubmit("missing")
