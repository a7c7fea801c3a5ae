from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

from adminia.documents.exceptions import ImmutableFieldError
from adminia.documents.models import (
    Document,
    DocumentStatistics,
    DocumentStatus,
    NewDocument,
    QueueEntry,
    QueueStatus,
)
from adminia.exceptions import InvalidInputError

MUTABLE_DOCUMENT_FIELDS = frozenset(
    {
        "name",
        "original_name",
        "mime_type",
        "size",
        "status",
        "category",
        "ai_analysis",
        "extracted_data",
    }
)
IMMUTABLE_DOCUMENT_FIELDS = frozenset({"id", "object_path", "created_at", "updated_at"})
MUTABLE_QUEUE_FIELDS = frozenset({"status", "result", "error"})


def validate_document_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Check an update payload and coerce its status value.

    Raises:
        ImmutableFieldError: if the payload touches id, object_path or timestamps.
        InvalidInputError: on unknown fields or an unknown status.
    """
    immutable = IMMUTABLE_DOCUMENT_FIELDS.intersection(changes)
    if immutable:
        raise ImmutableFieldError(f"Fields cannot be changed: {sorted(immutable)}")
    unknown = set(changes) - MUTABLE_DOCUMENT_FIELDS
    if unknown:
        raise InvalidInputError(f"Unknown document fields: {sorted(unknown)}")
    validated = dict(changes)
    if "status" in validated:
        validated["status"] = _coerce_status(DocumentStatus, validated["status"])
    return validated


def validate_queue_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Check a queue entry update payload and coerce its status value."""
    unknown = set(changes) - MUTABLE_QUEUE_FIELDS
    if unknown:
        raise InvalidInputError(f"Unknown queue entry fields: {sorted(unknown)}")
    validated = dict(changes)
    if "status" in validated:
        validated["status"] = _coerce_status(QueueStatus, validated["status"])
    return validated


def check_analysis_invariant(document: Document) -> None:
    """Analysis fields may only be populated on a completed document."""
    if document.status is DocumentStatus.COMPLETED:
        return
    populated = [
        name
        for name in ("ai_analysis", "extracted_data", "category")
        if getattr(document, name) is not None
    ]
    if populated:
        raise InvalidInputError(
            f"Document {document.id} in status '{document.status.value}' "
            f"cannot carry {populated}"
        )


def _coerce_status(enum_cls: type[DocumentStatus] | type[QueueStatus], value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise InvalidInputError(f"Unknown status: {value!r}") from exc


class BaseDocumentStore(ABC):
    """Contract for document persistence backends."""

    @abstractmethod
    def create(self, new_document: NewDocument) -> Document:
        """Persist a new document in `pending` status and return it."""

    @abstractmethod
    def get_by_id(self, document_id: str) -> Document:
        """Return a document.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """

    @abstractmethod
    def list_all(self) -> list[Document]:
        """Return every document, newest first."""

    @abstractmethod
    def list_by_category(self, category: str) -> list[Document]:
        """Return documents of one category, newest first."""

    @abstractmethod
    def list_recent(self, limit: int) -> list[Document]:
        """Return at most `limit` documents, newest first."""

    @abstractmethod
    def update(self, document_id: str, changes: Mapping[str, Any]) -> Document:
        """Merge `changes` into a document and refresh `updated_at`.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
            ImmutableFieldError: if `changes` touches `object_path`.
            InvalidInputError: on unknown fields or a broken analysis invariant.
        """

    @abstractmethod
    def transition_status(
        self,
        document_id: str,
        *,
        from_statuses: Iterable[DocumentStatus],
        to_status: DocumentStatus,
        changes: Mapping[str, Any] | None = None,
    ) -> Document | None:
        """Compare-and-set the status; None when the current status does not match.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """

    @abstractmethod
    def delete(self, document_id: str) -> None:
        """Hard delete a document together with its queue entries.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """

    @abstractmethod
    def statistics(self) -> DocumentStatistics:
        """Aggregate counters for the dashboard."""


class BaseProcessingQueue(ABC):
    """Contract for the analysis queue backends."""

    @abstractmethod
    def enqueue(self, document_id: str) -> QueueEntry | None:
        """Create a `pending` entry; None if the document already has an active one.

        Raises:
            DocumentNotFoundError: if the document does not exist.
        """

    @abstractmethod
    def list_all(self) -> list[QueueEntry]:
        """Return every entry, oldest first."""

    @abstractmethod
    def list_pending(self, limit: int) -> list[QueueEntry]:
        """Return at most `limit` pending entries, oldest first."""

    @abstractmethod
    def list_for_document(self, document_id: str) -> list[QueueEntry]:
        """Return every entry of one document, oldest first."""

    @abstractmethod
    def find_active(self, document_id: str) -> QueueEntry | None:
        """Return the pending or processing entry of a document, if any."""

    @abstractmethod
    def claim(self, entry_id: str) -> QueueEntry | None:
        """Atomically move a `pending` entry to `processing`.

        Returns None when the entry is missing or no longer pending.
        """

    @abstractmethod
    def update(self, entry_id: str, changes: Mapping[str, Any]) -> QueueEntry:
        """Merge `changes` into an entry and refresh `updated_at`.

        Raises:
            QueueEntryNotFoundError: if no entry with this ID exists.
        """
