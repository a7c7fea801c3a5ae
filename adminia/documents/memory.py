"""In-process document store and queue sharing one lock-guarded database."""

import copy
import threading
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any

from adminia.documents.base import (
    BaseDocumentStore,
    BaseProcessingQueue,
    check_analysis_invariant,
    validate_document_changes,
    validate_queue_changes,
)
from adminia.documents.exceptions import DocumentNotFoundError, QueueEntryNotFoundError
from adminia.documents.models import (
    ACTIVE_QUEUE_STATUSES,
    Document,
    DocumentStatistics,
    DocumentStatus,
    NewDocument,
    QueueEntry,
    QueueStatus,
)
from adminia.exceptions import InvalidInputError


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class InMemoryDatabase:
    """Tables shared by InMemoryDocumentStore and InMemoryProcessingQueue."""

    clock: Callable[[], datetime] = utc_now
    documents: dict[str, Document] = field(default_factory=dict)
    queue: dict[str, QueueEntry] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock)
    _last_timestamp: datetime | None = field(default=None, init=False, repr=False)

    def next_timestamp(self) -> datetime:
        """Return a timestamp strictly later than every one handed out before."""
        with self.lock:
            now = self.clock()
            if self._last_timestamp is not None and now <= self._last_timestamp:
                now = self._last_timestamp + timedelta(microseconds=1)
            self._last_timestamp = now
            return now


def _copy_document(document: Document) -> Document:
    return replace(
        document,
        ai_analysis=copy.deepcopy(document.ai_analysis),
        extracted_data=copy.deepcopy(document.extracted_data),
    )


def _copy_entry(entry: QueueEntry) -> QueueEntry:
    return replace(entry, result=copy.deepcopy(entry.result))


class InMemoryDocumentStore(BaseDocumentStore):
    """Thread-safe document store kept in process memory."""

    def __init__(self, database: InMemoryDatabase) -> None:
        self._db = database

    def create(self, new_document: NewDocument) -> Document:
        with self._db.lock:
            now = self._db.next_timestamp()
            document = Document(
                id=str(uuid.uuid4()),
                name=new_document.name,
                original_name=new_document.original_name,
                mime_type=new_document.mime_type,
                size=new_document.size,
                object_path=new_document.object_path,
                created_at=now,
                updated_at=now,
            )
            self._db.documents[document.id] = document
            return _copy_document(document)

    def get_by_id(self, document_id: str) -> Document:
        with self._db.lock:
            return _copy_document(self._require(document_id))

    def list_all(self) -> list[Document]:
        with self._db.lock:
            return [_copy_document(d) for d in self._newest_first(self._db.documents.values())]

    def list_by_category(self, category: str) -> list[Document]:
        with self._db.lock:
            matching = (d for d in self._db.documents.values() if d.category == category)
            return [_copy_document(d) for d in self._newest_first(matching)]

    def list_recent(self, limit: int) -> list[Document]:
        if limit < 0:
            raise InvalidInputError("limit must not be negative")
        return self.list_all()[:limit]

    def update(self, document_id: str, changes: Mapping[str, Any]) -> Document:
        validated = validate_document_changes(changes)
        with self._db.lock:
            current = self._require(document_id)
            return self._apply(current, validated)

    def transition_status(
        self,
        document_id: str,
        *,
        from_statuses: Iterable[DocumentStatus],
        to_status: DocumentStatus,
        changes: Mapping[str, Any] | None = None,
    ) -> Document | None:
        validated = validate_document_changes({**(changes or {}), "status": to_status})
        expected = frozenset(from_statuses)
        with self._db.lock:
            current = self._require(document_id)
            if current.status not in expected:
                return None
            return self._apply(current, validated)

    def delete(self, document_id: str) -> None:
        with self._db.lock:
            self._require(document_id)
            del self._db.documents[document_id]
            orphaned = [e.id for e in self._db.queue.values() if e.document_id == document_id]
            for entry_id in orphaned:
                del self._db.queue[entry_id]

    def statistics(self) -> DocumentStatistics:
        with self._db.lock:
            today = self._db.clock().astimezone(timezone.utc).date()
            documents = list(self._db.documents.values())
            processed_today = sum(
                1
                for d in documents
                if d.status is DocumentStatus.COMPLETED
                and d.updated_at is not None
                and d.updated_at.astimezone(timezone.utc).date() == today
            )
            pending = sum(1 for e in self._db.queue.values() if e.status in ACTIVE_QUEUE_STATUSES)
            category_counts: dict[str, int] = {}
            for d in documents:
                if d.category is not None:
                    category_counts[d.category] = category_counts.get(d.category, 0) + 1
        return DocumentStatistics(
            total_documents=len(documents),
            processed_today=processed_today,
            pending_analysis=pending,
            category_counts=category_counts,
        )

    def _require(self, document_id: str) -> Document:
        document = self._db.documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return document

    def _apply(self, current: Document, changes: dict[str, Any]) -> Document:
        updated = replace(current, **copy.deepcopy(changes))
        check_analysis_invariant(updated)
        updated.updated_at = self._db.next_timestamp()
        self._db.documents[current.id] = updated
        return _copy_document(updated)

    @staticmethod
    def _newest_first(documents: Iterable[Document]) -> list[Document]:
        return sorted(documents, key=lambda d: d.created_at or _EPOCH, reverse=True)


class InMemoryProcessingQueue(BaseProcessingQueue):
    """Thread-safe processing queue kept in process memory."""

    def __init__(self, database: InMemoryDatabase) -> None:
        self._db = database

    def enqueue(self, document_id: str) -> QueueEntry | None:
        with self._db.lock:
            if document_id not in self._db.documents:
                raise DocumentNotFoundError(f"Document {document_id} not found")
            if self._active_for(document_id) is not None:
                return None
            now = self._db.next_timestamp()
            entry = QueueEntry(
                id=str(uuid.uuid4()),
                document_id=document_id,
                status=QueueStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            self._db.queue[entry.id] = entry
            return _copy_entry(entry)

    def list_all(self) -> list[QueueEntry]:
        with self._db.lock:
            return [_copy_entry(e) for e in self._oldest_first(self._db.queue.values())]

    def list_pending(self, limit: int) -> list[QueueEntry]:
        if limit < 0:
            raise InvalidInputError("limit must not be negative")
        with self._db.lock:
            pending = (e for e in self._db.queue.values() if e.status is QueueStatus.PENDING)
            return [_copy_entry(e) for e in self._oldest_first(pending)[:limit]]

    def list_for_document(self, document_id: str) -> list[QueueEntry]:
        with self._db.lock:
            entries = (e for e in self._db.queue.values() if e.document_id == document_id)
            return [_copy_entry(e) for e in self._oldest_first(entries)]

    def find_active(self, document_id: str) -> QueueEntry | None:
        with self._db.lock:
            entry = self._active_for(document_id)
            return _copy_entry(entry) if entry is not None else None

    def claim(self, entry_id: str) -> QueueEntry | None:
        with self._db.lock:
            current = self._db.queue.get(entry_id)
            if current is None or current.status is not QueueStatus.PENDING:
                return None
            claimed = replace(
                current, status=QueueStatus.PROCESSING, updated_at=self._db.next_timestamp()
            )
            self._db.queue[entry_id] = claimed
            return _copy_entry(claimed)

    def update(self, entry_id: str, changes: Mapping[str, Any]) -> QueueEntry:
        validated = validate_queue_changes(changes)
        with self._db.lock:
            current = self._db.queue.get(entry_id)
            if current is None:
                raise QueueEntryNotFoundError(f"Queue entry {entry_id} not found")
            becomes_active = validated.get("status", current.status) in ACTIVE_QUEUE_STATUSES
            if becomes_active and not current.is_active:
                other = self._active_for(current.document_id)
                if other is not None:
                    raise InvalidInputError(
                        f"Document {current.document_id} already has active entry {other.id}"
                    )
            updated = replace(current, **copy.deepcopy(validated))
            updated.updated_at = self._db.next_timestamp()
            self._db.queue[entry_id] = updated
            return _copy_entry(updated)

    def _active_for(self, document_id: str) -> QueueEntry | None:
        for entry in self._db.queue.values():
            if entry.document_id == document_id and entry.is_active:
                return entry
        return None

    @staticmethod
    def _oldest_first(entries: Iterable[QueueEntry]) -> list[QueueEntry]:
        return sorted(entries, key=lambda e: e.created_at or _EPOCH)
