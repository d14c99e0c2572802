"""
Invoice pipeline shared by the admin and subcontractor invoice routes.

    job (under caller scope) -> normalize line items -> total
        -> ensure invoice row -> render PDF

Persistence policy: with INVOICE_PERSISTENCE_STRICT off (the default) a
failure to look up or create the invoice row is logged as a warning and the
document is still rendered from the computed data. With it on, the
PersistenceError propagates to the caller.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from billing.access import JobScope
from billing.config import settings
from billing.exceptions import (
    JobNotFoundError,
    PersistenceError,
    ProfileNotFoundError,
    RenderingError,
)
from billing.invoicing.line_items import calculate_total, normalize_line_items
from billing.invoicing.materializer import ensure_invoice
from billing.models.invoice import InvoiceDocument, InvoiceRef
from billing.models.job import Job
from billing.rendering.invoice_pdf import InvoicePDFRenderer
from billing.services.db_service import DatabaseService

logger = logging.getLogger(__name__)


class InvoiceService:
    """Builds invoice documents and materializes invoice rows for jobs"""

    def __init__(
        self,
        renderer: Optional[InvoicePDFRenderer] = None,
        strict_persistence: Optional[bool] = None,
    ):
        """
        Args:
            renderer: PDF renderer (defaults to InvoicePDFRenderer())
            strict_persistence: Propagate invoice persistence errors instead of
                degrading (defaults to INVOICE_PERSISTENCE_STRICT)
        """
        self.renderer = renderer or InvoicePDFRenderer()
        self.strict_persistence = (
            settings.INVOICE_PERSISTENCE_STRICT if strict_persistence is None else strict_persistence
        )

    async def materialize_for_job(
        self,
        db: AsyncSession,
        job: Job,
        total_amount: Optional[float] = None,
    ) -> Optional[InvoiceRef]:
        """
        Ensure the invoice row for a job exists, applying the persistence policy.

        Args:
            job: Job to bill
            total_amount: Precomputed total; computed from job.line_items when omitted

        Returns:
            InvoiceRef, or None when persistence failed in best-effort mode
        """
        if total_amount is None:
            total_amount = calculate_total(normalize_line_items(job.line_items))

        try:
            return await ensure_invoice(db, job.id, job.subcontractor_id, total_amount)
        except PersistenceError as e:
            if self.strict_persistence:
                raise
            logger.warning(
                f"Invoice persistence failed for job {job.id}; continuing without invoice row: {e}"
            )
            return None

    async def generate_invoice_document(
        self,
        db: AsyncSession,
        job_id: str,
        scope: JobScope,
    ) -> InvoiceDocument:
        """
        Produce the invoice PDF for a job

        Args:
            db: Async database session
            job_id: Job ID
            scope: Caller's access predicate

        Returns:
            InvoiceDocument with PDF bytes and the computed data

        Raises:
            JobNotFoundError: job missing or outside scope
            ProfileNotFoundError: owning subcontractor profile missing
            PersistenceError: invoice row could not be ensured (strict mode only)
            RenderingError: the PDF renderer failed
        """
        job = await DatabaseService.get_job(job_id, db, scope)
        if not job:
            raise JobNotFoundError(job_id)

        subcontractor = await DatabaseService.get_profile(job.subcontractor_id, db)
        if not subcontractor:
            raise ProfileNotFoundError(job.subcontractor_id)

        line_items = normalize_line_items(job.line_items)
        total_amount = calculate_total(line_items)
        recipient_text = await DatabaseService.get_recipient_text(db)

        invoice = await self.materialize_for_job(db, job, total_amount)

        try:
            content = self.renderer.render(
                job=job,
                subcontractor=subcontractor,
                line_items=line_items,
                recipient_text=recipient_text,
                total_amount=total_amount,
            )
        except Exception as e:
            logger.error(f"Error generating PDF for job {job_id}: {e}", exc_info=True)
            raise RenderingError(job_id, e) from e

        logger.info(
            f"Generated invoice PDF for job {job_id}: {len(line_items)} line items, total {total_amount}"
        )
        return InvoiceDocument(
            job_id=job.id,
            filename=f"invoice-{job.id}.pdf",
            content=content,
            total_amount=total_amount,
            line_items=line_items,
            invoice=invoice,
        )
