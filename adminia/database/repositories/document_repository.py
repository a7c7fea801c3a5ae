import uuid
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from adminia.database.connection import Database
from adminia.database.models import DOCUMENT_COLUMNS, document_from_row
from adminia.documents.base import (
    BaseDocumentStore,
    check_analysis_invariant,
    validate_document_changes,
)
from adminia.documents.exceptions import DocumentNotFoundError
from adminia.documents.models import (
    Document,
    DocumentStatistics,
    DocumentStatus,
    NewDocument,
)
from adminia.exceptions import AdminiaError, InvalidInputError


def _jsonb(value: dict[str, Any] | None) -> Jsonb | None:
    return Jsonb(value) if value is not None else None


class PostgresDocumentStore(BaseDocumentStore):
    """Database operations for the documents table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def create(self, new_document: NewDocument) -> Document:
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO documents
                    (id, name, original_name, mime_type, size, object_path, status)
                    VALUES (%s, %s, %s, %s, %s, %s, 'pending')
                    RETURNING {DOCUMENT_COLUMNS}
                    """,
                    (
                        str(uuid.uuid4()),
                        new_document.name,
                        new_document.original_name,
                        new_document.mime_type,
                        new_document.size,
                        new_document.object_path,
                    ),
                )
                row = cur.fetchone()
            if row is None:
                conn.rollback()
                raise AdminiaError(f"Insert of document {new_document.name!r} returned no row")
            conn.commit()
        return document_from_row(row)

    def get_by_id(self, document_id: str) -> Document:
        """Find a document by ID.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {DOCUMENT_COLUMNS} FROM documents WHERE id = %s",
                    (document_id,),
                )
                row = cur.fetchone()
        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return document_from_row(row)

    def list_all(self) -> list[Document]:
        return self._select_many(
            f"SELECT {DOCUMENT_COLUMNS} FROM documents ORDER BY created_at DESC, id",
            (),
        )

    def list_by_category(self, category: str) -> list[Document]:
        return self._select_many(
            f"""
            SELECT {DOCUMENT_COLUMNS} FROM documents
            WHERE category = %s
            ORDER BY created_at DESC, id
            """,
            (category,),
        )

    def list_recent(self, limit: int) -> list[Document]:
        if limit < 0:
            raise InvalidInputError("limit must not be negative")
        return self._select_many(
            f"""
            SELECT {DOCUMENT_COLUMNS} FROM documents
            ORDER BY created_at DESC, id
            LIMIT %s
            """,
            (limit,),
        )

    def update(self, document_id: str, changes: Mapping[str, Any]) -> Document:
        validated = validate_document_changes(changes)
        updated = self._locked_update(document_id, validated, expected=None)
        if updated is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return updated

    def transition_status(
        self,
        document_id: str,
        *,
        from_statuses: Iterable[DocumentStatus],
        to_status: DocumentStatus,
        changes: Mapping[str, Any] | None = None,
    ) -> Document | None:
        validated = validate_document_changes({**(changes or {}), "status": to_status})
        return self._locked_update(document_id, validated, expected=frozenset(from_statuses))

    def delete(self, document_id: str) -> None:
        """Delete a document and its queue entries in one transaction.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM ai_processing_queue WHERE document_id = %s",
                    (document_id,),
                )
                cur.execute("DELETE FROM documents WHERE id = %s", (document_id,))
                if cur.rowcount == 0:
                    conn.rollback()
                    raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()

    def statistics(self) -> DocumentStatistics:
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM documents")
                total = self._scalar(cur)
                cur.execute(
                    """
                    SELECT COUNT(*) FROM documents
                    WHERE status = 'completed'
                      AND (updated_at AT TIME ZONE 'UTC')::date
                          = (NOW() AT TIME ZONE 'UTC')::date
                    """
                )
                processed_today = self._scalar(cur)
                cur.execute(
                    """
                    SELECT COUNT(*) FROM ai_processing_queue
                    WHERE status IN ('pending', 'processing')
                    """
                )
                pending = self._scalar(cur)
                cur.execute(
                    """
                    SELECT category, COUNT(*) FROM documents
                    WHERE category IS NOT NULL
                    GROUP BY category
                    """
                )
                category_counts = {str(name): int(count) for name, count in cur.fetchall()}
        return DocumentStatistics(
            total_documents=total,
            processed_today=processed_today,
            pending_analysis=pending,
            category_counts=category_counts,
        )

    def _locked_update(
        self,
        document_id: str,
        changes: dict[str, Any],
        expected: frozenset[DocumentStatus] | None,
    ) -> Document | None:
        """Row-lock the document, merge changes, and write them back.

        Returns None without writing when `expected` does not contain the current status.
        """
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {DOCUMENT_COLUMNS} FROM documents WHERE id = %s FOR UPDATE",
                    (document_id,),
                )
                row = cur.fetchone()
                if row is None:
                    conn.rollback()
                    raise DocumentNotFoundError(f"Document {document_id} not found")
                current = document_from_row(row)
                if expected is not None and current.status not in expected:
                    conn.rollback()
                    return None
                merged = replace(current, **changes)
                try:
                    check_analysis_invariant(merged)
                except InvalidInputError:
                    conn.rollback()
                    raise
                cur.execute(
                    f"""
                    UPDATE documents
                    SET name = %s,
                        original_name = %s,
                        mime_type = %s,
                        size = %s,
                        status = %s,
                        category = %s,
                        ai_analysis = %s,
                        extracted_data = %s,
                        updated_at = GREATEST(NOW(), updated_at + INTERVAL '1 microsecond')
                    WHERE id = %s
                    RETURNING {DOCUMENT_COLUMNS}
                    """,
                    (
                        merged.name,
                        merged.original_name,
                        merged.mime_type,
                        merged.size,
                        merged.status.value,
                        merged.category,
                        _jsonb(merged.ai_analysis),
                        _jsonb(merged.extracted_data),
                        document_id,
                    ),
                )
                updated_row = cur.fetchone()
            if updated_row is None:
                conn.rollback()
                raise DocumentNotFoundError(f"Document {document_id} not found")
            conn.commit()
        return document_from_row(updated_row)

    def _select_many(self, query: str, params: tuple[Any, ...]) -> list[Document]:
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        return [document_from_row(row) for row in rows]

    @staticmethod
    def _scalar(cur: psycopg.Cursor[Any]) -> int:
        row = cur.fetchone()
        return int(row[0]) if row is not None else 0
