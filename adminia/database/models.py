from typing import Any

from adminia.documents.models import Document, DocumentStatus, QueueEntry, QueueStatus

DOCUMENT_COLUMNS = (
    "id, name, original_name, mime_type, size, object_path, category, status, "
    "ai_analysis, extracted_data, created_at, updated_at"
)

QUEUE_COLUMNS = "id, document_id, status, result, error, created_at, updated_at"


def document_from_row(row: dict[str, Any]) -> Document:
    """Build a Document from a `documents` row fetched with dict_row."""
    return Document(
        id=row["id"],
        name=row["name"],
        original_name=row["original_name"],
        mime_type=row["mime_type"],
        size=row["size"],
        object_path=row["object_path"],
        category=row["category"],
        status=DocumentStatus(row["status"]),
        ai_analysis=row["ai_analysis"],
        extracted_data=row["extracted_data"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def queue_entry_from_row(row: dict[str, Any]) -> QueueEntry:
    """Build a QueueEntry from an `ai_processing_queue` row fetched with dict_row."""
    return QueueEntry(
        id=row["id"],
        document_id=row["document_id"],
        status=QueueStatus(row["status"]),
        result=row["result"],
        error=row["error"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
