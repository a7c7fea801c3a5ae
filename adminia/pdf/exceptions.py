from adminia.exceptions import AdminiaError


class PdfExtractionError(AdminiaError):
    """Raised when text cannot be extracted from a PDF document."""
