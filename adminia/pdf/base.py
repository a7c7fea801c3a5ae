from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for the engines that turn an uploaded PDF into analyzable text."""

    engine_name: str = ""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Return the text of every page, joined by newlines and stripped.

        A scanned PDF without a text layer yields an empty string.

        Raises:
            PdfExtractionError: if the bytes cannot be parsed as a PDF.
        """
