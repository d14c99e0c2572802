"""PDF invoice renderer"""

import logging
from typing import List, Optional
from io import BytesIO

from reportlab.pdfgen import canvas
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch
from reportlab.lib.colors import black, HexColor

from billing.config import settings
from billing.invoicing.line_items import line_total
from billing.models.invoice import NormalizedLineItem
from billing.models.job import Job, Profile
from billing.models.money import format_amount, format_currency, format_quantity

logger = logging.getLogger(__name__)

HEADER_GREY = HexColor("#f2f2f2")
RULE_GREY = HexColor("#cccccc")

MARGIN = 0.42 * inch
ROW_HEIGHT = 0.28 * inch
COLUMNS = ("Description", "Quantity", "Unit Price", "Amount")


class InvoicePDFRenderer:
    """Renders a job's invoice as a single- or multi-page A4 PDF"""

    def __init__(self, currency: Optional[str] = None, page_compression: Optional[int] = None):
        """
        Args:
            currency: Currency label printed before the total (defaults to INVOICE_CURRENCY)
            page_compression: Passed to the ReportLab canvas; 0 keeps page text searchable
        """
        self.currency = currency or settings.INVOICE_CURRENCY
        self.page_compression = page_compression
        self.page_width, self.page_height = A4

    def render(
        self,
        job: Job,
        subcontractor: Profile,
        line_items: List[NormalizedLineItem],
        recipient_text: str,
        total_amount: float,
    ) -> bytes:
        """
        Render the invoice document

        Args:
            job: Job being billed
            subcontractor: Owning subcontractor profile (header block)
            line_items: Normalized line items, rendered in order
            recipient_text: Salutation printed under the title
            total_amount: Precomputed total

        Returns:
            PDF bytes
        """
        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4, pageCompression=self.page_compression)
        pdf.setTitle(f"Invoice {job.id}")
        pdf.setAuthor(subcontractor.company_name or "Subcontractor")

        y = self._render_header(pdf, subcontractor)
        y = self._render_title(pdf, y, recipient_text)
        y = self._render_job_details(pdf, y, job)
        y = self._render_line_items(pdf, y, line_items)
        self._render_total(pdf, y, total_amount)

        pdf.showPage()
        pdf.save()
        logger.debug(f"Rendered invoice PDF for job {job.id} ({len(line_items)} line items)")
        return buffer.getvalue()

    def _render_header(self, pdf: canvas.Canvas, subcontractor: Profile) -> float:
        """Company name and address, right aligned, above a rule"""
        right = self.page_width - MARGIN
        y = self.page_height - MARGIN - 10

        pdf.setFillColor(black)
        pdf.setFont("Helvetica", 10)
        pdf.drawRightString(right, y, subcontractor.company_name or "Subcontractor")
        if subcontractor.address:
            for line in subcontractor.address.splitlines():
                y -= 14
                pdf.drawRightString(right, y, line.strip())

        y -= 12
        pdf.setStrokeColor(RULE_GREY)
        pdf.line(MARGIN, y, right, y)
        return y - 20

    def _render_title(self, pdf: canvas.Canvas, y: float, recipient_text: str) -> float:
        pdf.setFont("Helvetica-Bold", 24)
        pdf.drawCentredString(self.page_width / 2, y - 14, "Invoice")
        y -= 50

        pdf.setFont("Helvetica", 11)
        for line in (recipient_text or "").splitlines() or [""]:
            pdf.drawString(MARGIN, y, line)
            y -= 16
        return y - 14

    def _render_job_details(self, pdf: canvas.Canvas, y: float, job: Job) -> float:
        pdf.setFont("Helvetica", 11)
        pdf.drawString(MARGIN, y, f"Job ID: {job.id}")
        y -= 16
        pdf.drawString(MARGIN, y, f"Job Description: {job.job_type or 'N/A'}")
        y -= 16
        if job.location:
            pdf.drawString(MARGIN, y, f"Location: {job.location}")
            y -= 16
        return y - 14

    def _render_line_items(self, pdf: canvas.Canvas, y: float, line_items: List[NormalizedLineItem]) -> float:
        """Four-column table; starts a new page (with the header row) when it runs out of room"""
        y = self._render_table_row(pdf, y, COLUMNS, header=True)

        for item in line_items:
            if y - ROW_HEIGHT < MARGIN:
                pdf.showPage()
                y = self._render_table_row(pdf, self.page_height - MARGIN, COLUMNS, header=True)

            cells = (
                item.description,
                format_quantity(item.quantity),
                format_amount(item.unit_price),
                format_amount(line_total(item)),
            )
            y = self._render_table_row(pdf, y, cells)
        return y

    def _render_table_row(self, pdf: canvas.Canvas, y: float, cells, header: bool = False) -> float:
        col_width = (self.page_width - 2 * MARGIN) / len(COLUMNS)
        top = y
        bottom = y - ROW_HEIGHT

        pdf.setStrokeColor(black)
        for i, text in enumerate(cells):
            x = MARGIN + i * col_width
            if header:
                pdf.setFillColor(HEADER_GREY)
                pdf.rect(x, bottom, col_width, ROW_HEIGHT, fill=1, stroke=1)
            else:
                pdf.rect(x, bottom, col_width, ROW_HEIGHT, fill=0, stroke=1)

            font = "Helvetica-Bold" if header else "Helvetica"
            pdf.setFillColor(black)
            pdf.setFont(font, 10)
            pdf.drawString(x + 5, bottom + 7, self._fit(pdf, str(text), font, 10, col_width - 10))
        return top - ROW_HEIGHT

    def _render_total(self, pdf: canvas.Canvas, y: float, total_amount: float):
        if y - 40 < MARGIN:
            pdf.showPage()
            y = self.page_height - MARGIN
        pdf.setFont("Helvetica-Bold", 11)
        pdf.drawRightString(
            self.page_width - MARGIN,
            y - 30,
            f"Total Amount: {format_currency(total_amount, self.currency)}",
        )

    @staticmethod
    def _fit(pdf: canvas.Canvas, text: str, font: str, size: float, width: float) -> str:
        """Truncate text with an ellipsis so it stays inside its cell"""
        if pdf.stringWidth(text, font, size) <= width:
            return text
        while text and pdf.stringWidth(text + "...", font, size) > width:
            text = text[:-1]
        return text + "..."
