import io

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

INVOICE_TEXT = "Invoice INV-2024-001 Total 120.00 EUR"
CONTRACT_PAGES = ("Rental contract between the parties", "Signed in Paris on 2024-03-01")


def _render_pdf(*pages: str) -> bytes:
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=A4)
    for text in pages:
        if text:
            pdf.drawString(72, 760, text)
        pdf.showPage()
    pdf.save()
    return buf.getvalue()


@pytest.fixture()
def invoice_pdf_bytes() -> bytes:
    """Single-page PDF with a text layer."""
    return _render_pdf(INVOICE_TEXT)


@pytest.fixture()
def contract_pdf_bytes() -> bytes:
    return _render_pdf(*CONTRACT_PAGES)


@pytest.fixture()
def blank_pdf_bytes() -> bytes:
    """A scan-like PDF: one page, no text layer."""
    return _render_pdf("")
