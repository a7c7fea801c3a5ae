import uuid
from collections.abc import Mapping
from typing import Any

from psycopg import sql
from psycopg.errors import ForeignKeyViolation, UniqueViolation
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from adminia.database.connection import Database
from adminia.database.models import QUEUE_COLUMNS, queue_entry_from_row
from adminia.documents.base import BaseProcessingQueue, validate_queue_changes
from adminia.documents.exceptions import DocumentNotFoundError, QueueEntryNotFoundError
from adminia.documents.models import QueueEntry
from adminia.exceptions import InvalidInputError


class PostgresProcessingQueue(BaseProcessingQueue):
    """Database operations for the ai_processing_queue table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def enqueue(self, document_id: str) -> QueueEntry | None:
        """Insert a pending entry unless the document already has an active one.

        The partial unique index on active entries turns a concurrent duplicate
        into a no-op instead of a second row. The foreign key rejects unknown documents.

        Raises:
            DocumentNotFoundError: if the document does not exist.
        """
        with self._db.connection() as conn:
            try:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"""
                        INSERT INTO ai_processing_queue (id, document_id, status)
                        SELECT %s, %s, 'pending'
                        WHERE NOT EXISTS (
                            SELECT 1 FROM ai_processing_queue
                            WHERE document_id = %s
                              AND status IN ('pending', 'processing')
                        )
                        ON CONFLICT DO NOTHING
                        RETURNING {QUEUE_COLUMNS}
                        """,
                        (str(uuid.uuid4()), document_id, document_id),
                    )
                    row = cur.fetchone()
            except ForeignKeyViolation as exc:
                conn.rollback()
                raise DocumentNotFoundError(f"Document {document_id} not found") from exc
            conn.commit()
        if row is None:
            return None
        return queue_entry_from_row(row)

    def claim(self, entry_id: str) -> QueueEntry | None:
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    UPDATE ai_processing_queue
                    SET status = 'processing',
                        updated_at = GREATEST(NOW(), updated_at + INTERVAL '1 microsecond')
                    WHERE id = %s AND status = 'pending'
                    RETURNING {QUEUE_COLUMNS}
                    """,
                    (entry_id,),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            return None
        return queue_entry_from_row(row)

    def list_all(self) -> list[QueueEntry]:
        return self._select_many(
            f"SELECT {QUEUE_COLUMNS} FROM ai_processing_queue ORDER BY created_at, id",
            (),
        )

    def list_pending(self, limit: int) -> list[QueueEntry]:
        if limit < 0:
            raise InvalidInputError("limit must not be negative")
        return self._select_many(
            f"""
            SELECT {QUEUE_COLUMNS} FROM ai_processing_queue
            WHERE status = 'pending'
            ORDER BY created_at, id
            LIMIT %s
            """,
            (limit,),
        )

    def list_for_document(self, document_id: str) -> list[QueueEntry]:
        return self._select_many(
            f"""
            SELECT {QUEUE_COLUMNS} FROM ai_processing_queue
            WHERE document_id = %s
            ORDER BY created_at, id
            """,
            (document_id,),
        )

    def find_active(self, document_id: str) -> QueueEntry | None:
        entries = self._select_many(
            f"""
            SELECT {QUEUE_COLUMNS} FROM ai_processing_queue
            WHERE document_id = %s
              AND status IN ('pending', 'processing')
            LIMIT 1
            """,
            (document_id,),
        )
        return entries[0] if entries else None

    def update(self, entry_id: str, changes: Mapping[str, Any]) -> QueueEntry:
        """Update the given columns of a queue entry.

        Raises:
            QueueEntryNotFoundError: if no entry with this ID exists.
            InvalidInputError: if the update would activate a second entry.
        """
        validated = validate_queue_changes(changes)
        assignments = [
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in validated
        ]
        assignments.append(
            sql.SQL("updated_at = GREATEST(NOW(), updated_at + INTERVAL '1 microsecond')")
        )
        query = sql.SQL("UPDATE ai_processing_queue SET {} WHERE id = %s RETURNING {}").format(
            sql.SQL(", ").join(assignments),
            sql.SQL(QUEUE_COLUMNS),
        )
        params = [self._to_db(column, value) for column, value in validated.items()]
        with self._db.connection() as conn:
            try:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(query, (*params, entry_id))
                    row = cur.fetchone()
            except UniqueViolation as exc:
                conn.rollback()
                raise InvalidInputError(
                    f"Queue entry {entry_id} cannot become active: {exc}"
                ) from exc
            if row is None:
                conn.rollback()
                raise QueueEntryNotFoundError(f"Queue entry {entry_id} not found")
            conn.commit()
        return queue_entry_from_row(row)

    def _select_many(self, query: str, params: tuple[Any, ...]) -> list[QueueEntry]:
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        return [queue_entry_from_row(row) for row in rows]

    @staticmethod
    def _to_db(column: str, value: Any) -> Any:
        if column == "status":
            return value.value
        if column == "result" and value is not None:
            return Jsonb(value)
        return value
