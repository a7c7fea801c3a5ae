from abc import ABC, abstractmethod

from adminia.analysis.models import AnalysisResult


class BaseDocumentAnalyzer(ABC):
    """Contract for document analysis engines."""

    @abstractmethod
    def analyze(
        self,
        text: str | None = None,
        image_base64: str | None = None,
        image_mime_type: str = "image/jpeg",
    ) -> AnalysisResult:
        """Categorize a document and extract its key data.

        Args:
            text: Document text, if known.
            image_base64: Base64-encoded image of the document, if any.
            image_mime_type: Mime type of the image.

        Returns:
            A fully defaulted AnalysisResult.

        Raises:
            AnalysisInputError: if neither text nor image is given.
            AnalysisFailedError: on provider or response failures.
        """

    @abstractmethod
    def extract_text(self, image_base64: str, image_mime_type: str = "image/jpeg") -> str:
        """Return the text visible in an image, "" when there is none.

        Raises:
            AnalysisFailedError: on provider failures.
        """
