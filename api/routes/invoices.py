"""API routes for invoice PDFs and invoice administration"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from api.dependencies import get_current_caller, require_admin
from billing.access import any_job, owned_by
from billing.models.database import get_db
from billing.models.invoice import Invoice, InvoiceDocument, InvoiceStatus, InvoiceStatusUpdate
from billing.models.job import Profile
from billing.services.db_service import DatabaseService
from billing.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["invoices"])


def get_invoice_service() -> InvoiceService:
    return InvoiceService()


def _pdf_response(document: InvoiceDocument) -> Response:
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{document.filename}"',
            "Content-Length": str(len(document.content)),
            "Cache-Control": "no-store",
        },
    )


@router.get("/invoices/{job_id}")
async def get_invoice_pdf(
    job_id: str,
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
    invoice_service: InvoiceService = Depends(get_invoice_service),
):
    """
    Download the invoice PDF for one of the caller's own jobs

    Args:
        job_id: Job ID

    Returns:
        PDF attachment named invoice-<job_id>.pdf
    """
    document = await invoice_service.generate_invoice_document(db, job_id, owned_by(caller.id))
    return _pdf_response(document)


@router.get("/admin/invoices/{job_id}")
async def get_invoice_pdf_admin(
    job_id: str,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    invoice_service: InvoiceService = Depends(get_invoice_service),
):
    """Download the invoice PDF for any job"""
    logger.info(f"Admin {admin.id} requested invoice for job {job_id}")
    document = await invoice_service.generate_invoice_document(db, job_id, any_job)
    return _pdf_response(document)


@router.get("/invoices", response_model=List[Invoice])
async def list_invoices(
    status: Optional[InvoiceStatus] = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
):
    """List invoices: all for administrators, own for subcontractors"""
    return await DatabaseService.list_invoices(
        db,
        subcontractor_id=None if caller.is_admin else caller.id,
        status=status,
        skip=skip,
        limit=limit,
    )


@router.patch("/admin/invoices/{invoice_id}/status", response_model=Invoice)
async def update_invoice_status(
    invoice_id: str,
    request: InvoiceStatusUpdate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Set unpaid / paid / overdue; any status may follow any other"""
    return await DatabaseService.update_invoice_status(invoice_id, request.status, db)
