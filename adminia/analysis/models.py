from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class AnalysisResult:
    """Normalized output of one document analysis."""

    category: str
    confidence: float
    extracted_data: dict[str, Any] = field(default_factory=dict)
    summary: str = ""
    key_information: list[str] = field(default_factory=list)
    document_type: str = "Unknown"

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON shape stored on documents and served by the API."""
        return {
            "category": self.category,
            "confidence": self.confidence,
            "extractedData": dict(self.extracted_data),
            "summary": self.summary,
            "keyInformation": list(self.key_information),
            "documentType": self.document_type,
        }
