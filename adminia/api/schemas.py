"""JSON shapes of the HTTP API. Keys are camelCase on the wire."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from adminia.analysis.models import AnalysisResult
from adminia.documents.categories import Category
from adminia.documents.models import (
    Document,
    DocumentStatistics,
    DocumentStatus,
    NewDocument,
    QueueEntry,
    QueueStatus,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadUrlResponse(CamelModel):
    upload_url: str = Field(alias="uploadURL")


class ObjectPathResponse(CamelModel):
    object_path: str


class DocumentCreate(CamelModel):
    """Metadata sent after the bytes were uploaded to the signed URL."""

    name: str
    original_name: str
    mime_type: str
    size: int = Field(ge=0)
    object_path: str

    def to_new_document(self) -> NewDocument:
        return NewDocument(
            name=self.name,
            original_name=self.original_name,
            mime_type=self.mime_type,
            size=self.size,
            object_path=self.object_path,
        )


class DocumentResponse(CamelModel):
    id: str
    name: str
    original_name: str
    mime_type: str
    size: int
    object_path: str
    category: str | None
    status: DocumentStatus
    ai_analysis: dict[str, Any] | None
    extracted_data: dict[str, Any] | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_document(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.id,
            name=document.name,
            original_name=document.original_name,
            mime_type=document.mime_type,
            size=document.size,
            object_path=document.object_path,
            category=document.category,
            status=document.status,
            ai_analysis=document.ai_analysis,
            extracted_data=document.extracted_data,
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class AnalysisResponse(CamelModel):
    category: str
    confidence: float
    extracted_data: dict[str, Any]
    summary: str
    key_information: list[str]
    document_type: str

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalysisResponse":
        return cls(
            category=result.category,
            confidence=result.confidence,
            extracted_data=dict(result.extracted_data),
            summary=result.summary,
            key_information=list(result.key_information),
            document_type=result.document_type,
        )


class QueueEntryResponse(CamelModel):
    id: str
    document_id: str
    status: QueueStatus
    result: dict[str, Any] | None
    error: str | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_entry(cls, entry: QueueEntry) -> "QueueEntryResponse":
        return cls(
            id=entry.id,
            document_id=entry.document_id,
            status=entry.status,
            result=entry.result,
            error=entry.error,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


class StatisticsResponse(CamelModel):
    total_documents: int
    processed_today: int
    pending_analysis: int
    category_counts: dict[str, int]

    @classmethod
    def from_statistics(cls, stats: DocumentStatistics) -> "StatisticsResponse":
        return cls(
            total_documents=stats.total_documents,
            processed_today=stats.processed_today,
            pending_analysis=stats.pending_analysis,
            category_counts=dict(stats.category_counts),
        )


class CategoryResponse(CamelModel):
    name: str
    icon: str
    color: str
    description: str

    @classmethod
    def from_category(cls, category: Category) -> "CategoryResponse":
        return cls(
            name=category.name,
            icon=category.icon,
            color=category.color,
            description=category.description,
        )
