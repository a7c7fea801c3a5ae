from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class DocumentStatus(str, Enum):
    """Lifecycle of a document: pending -> processing -> completed | error."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class QueueStatus(str, Enum):
    """Lifecycle of a processing queue entry (mirrors DocumentStatus)."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


ACTIVE_QUEUE_STATUSES = frozenset({QueueStatus.PENDING, QueueStatus.PROCESSING})

SUPPORTED_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "text/plain",
        "text/csv",
        "text/xml",
        "application/json",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)


def is_supported_mime_type(mime_type: str) -> bool:
    """Any image/* type plus the document formats in SUPPORTED_MIME_TYPES."""
    normalized = mime_type.strip().lower()
    if normalized.startswith("image/") and len(normalized) > len("image/"):
        return True
    return normalized in SUPPORTED_MIME_TYPES


@dataclass(frozen=True)
class NewDocument:
    """Validated metadata of an uploaded file, before it becomes a Document."""

    name: str
    original_name: str
    mime_type: str
    size: int
    object_path: str


@dataclass
class Document:
    """A stored document and its analysis state."""

    id: str
    name: str
    original_name: str
    mime_type: str
    size: int
    object_path: str
    status: DocumentStatus = DocumentStatus.PENDING
    category: str | None = None
    ai_analysis: dict[str, Any] | None = None
    extracted_data: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_image(self) -> bool:
        return self.mime_type.lower().startswith("image/")


@dataclass
class QueueEntry:
    """One analysis attempt of a document."""

    id: str
    document_id: str
    status: QueueStatus = QueueStatus.PENDING
    result: dict[str, Any] | None = None
    error: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_QUEUE_STATUSES


@dataclass(frozen=True)
class DocumentStatistics:
    """Dashboard aggregates over all documents and the queue."""

    total_documents: int
    processed_today: int
    pending_analysis: int
    category_counts: dict[str, int] = field(default_factory=dict)
