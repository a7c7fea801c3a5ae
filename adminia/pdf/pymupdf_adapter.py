import pymupdf

from adminia.logging.logger import Log
from adminia.pdf.base import BasePdfExtractor
from adminia.pdf.exceptions import PdfExtractionError


class PyMuPdfAdapter(BasePdfExtractor):
    """Text layer extraction with PyMuPDF."""

    engine_name = "pymupdf"

    def extract(self, pdf_bytes: bytes) -> str:
        if not pdf_bytes:
            raise PdfExtractionError("PDF document is empty")
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf could not read the PDF: {exc}") from exc
        Log.debug(f"pymupdf read {len(pages)} pages")
        return "\n".join(pages).strip()
