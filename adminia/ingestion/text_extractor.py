"""Turns stored document bytes into text the analyzer can categorize."""

from adminia.documents.models import Document
from adminia.logging.logger import Log
from adminia.pdf.base import BasePdfExtractor

DECODABLE_MIME_TYPES = frozenset(
    {
        "application/json",
        "application/xml",
        "text/xml",
    }
)


def describe_document(document: Document) -> str:
    """Text stand-in for formats whose content is not extracted."""
    return (
        f"Document '{document.original_name}' ({document.mime_type}, {document.size} bytes). "
        "Categorize it from its name and type."
    )


class DocumentTextExtractor:
    """Extracts text from PDF and text documents, describes everything else."""

    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def extract(self, document: Document, content: bytes) -> str:
        """Return non-empty text for a non-image document.

        Raises:
            PdfExtractionError: if a PDF cannot be parsed.
        """
        mime_type = document.mime_type.lower()
        if mime_type == "application/pdf":
            text = self._pdf_extractor.extract(content)
        elif mime_type.startswith("text/") or mime_type in DECODABLE_MIME_TYPES:
            text = content.decode("utf-8", errors="replace").strip()
        else:
            text = ""

        if not text:
            Log.info(f"No text extracted from document {document.id}, using its description")
            return describe_document(document)
        Log.info(f"Extracted {len(text)} chars from document {document.id}")
        return text
