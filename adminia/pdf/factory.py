from adminia.config.settings import Settings
from adminia.logging.logger import Log
from adminia.pdf.base import BasePdfExtractor
from adminia.pdf.pdfplumber_adapter import PdfPlumberAdapter
from adminia.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfExtractorFactory:
    """Creates the PDF text engine named by `pdf_engine`."""

    ENGINES: dict[str, type[BasePdfExtractor]] = {
        PdfPlumberAdapter.engine_name: PdfPlumberAdapter,
        PyMuPdfAdapter.engine_name: PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.strip().lower()
        engine_cls = cls.ENGINES.get(engine)
        if engine_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {sorted(cls.ENGINES)}"
            )
        Log.debug(f"Using PDF engine {engine}")
        return engine_cls()
