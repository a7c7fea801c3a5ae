from dataclasses import dataclass

from adminia.analysis.models import AnalysisResult
from adminia.documents.models import Document, QueueEntry


@dataclass(frozen=True)
class IngestionOutcome:
    """Terminal state of one analysis attempt."""

    document: Document
    queue_entry: QueueEntry
    analysis: AnalysisResult | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.analysis is not None and self.error is None
