import io

import pdfplumber

from adminia.logging.logger import Log
from adminia.pdf.base import BasePdfExtractor
from adminia.pdf.exceptions import PdfExtractionError


class PdfPlumberAdapter(BasePdfExtractor):
    """Text layer extraction with pdfplumber."""

    engine_name = "pdfplumber"

    def extract(self, pdf_bytes: bytes) -> str:
        if not pdf_bytes:
            raise PdfExtractionError("PDF document is empty")
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber could not read the PDF: {exc}") from exc
        Log.debug(f"pdfplumber read {len(pages)} pages")
        return "\n".join(pages).strip()
