"""
Invoice materialization: make sure exactly one invoice row exists per job.

The insert is an atomic INSERT ... ON CONFLICT (job_id) DO NOTHING on
PostgreSQL and SQLite, backed by the uq_invoices_job_id constraint, so two
concurrent requests for the same job cannot both create a row. On other
dialects a plain INSERT is used and a unique-constraint violation is read as
having lost the race to another writer.
"""

import logging
import math
import uuid
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from billing.config import settings
from billing.exceptions import AmountOutOfRangeError, InvoiceInsertError, InvoiceLookupError
from billing.models.db_models import Invoice as InvoiceDB
from billing.models.invoice import InvoiceRef, InvoiceStatus
from billing.models.money import amount_to_wire, to_decimal

logger = logging.getLogger(__name__)


async def _find_invoice_for_job(session: AsyncSession, job_id: str) -> Optional[InvoiceDB]:
    try:
        result = await session.execute(
            select(InvoiceDB).where(InvoiceDB.job_id == job_id).order_by(InvoiceDB.created_at)
        )
        # Duplicates from before the unique constraint: keep the oldest
        return result.scalars().first()
    except SQLAlchemyError as e:
        logger.error(f"Invoice lookup failed for job {job_id}: {e}", exc_info=True)
        raise InvoiceLookupError(job_id, e) from e


def _insert_ignoring_duplicates(session: AsyncSession, values: dict):
    dialect = session.bind.dialect.name if session.bind is not None else ""
    if dialect == "postgresql":
        return postgresql.insert(InvoiceDB).values(**values).on_conflict_do_nothing(
            index_elements=[InvoiceDB.job_id]
        )
    if dialect == "sqlite":
        return sqlite.insert(InvoiceDB).values(**values).on_conflict_do_nothing(
            index_elements=[InvoiceDB.job_id]
        )
    return insert(InvoiceDB).values(**values)


def _to_ref(invoice: InvoiceDB, created: bool) -> InvoiceRef:
    return InvoiceRef(
        id=invoice.id,
        job_id=invoice.job_id,
        status=InvoiceStatus(invoice.status),
        total_amount=invoice.total_amount,
        created=created,
    )


async def ensure_invoice(
    session: AsyncSession,
    job_id: str,
    subcontractor_id: str,
    total_amount: float,
    *,
    invoice_date: Optional[date] = None,
    due_days: Optional[int] = None,
) -> InvoiceRef:
    """
    Create the invoice for a job unless one already exists.

    Args:
        session: Async database session
        job_id: Job the invoice bills
        subcontractor_id: Owner of the job
        total_amount: Computed line item total (stored once, never recomputed)
        invoice_date: Issue date, defaults to today
        due_days: Days until due, defaults to INVOICE_DUE_DAYS

    Returns:
        Reference to the invoice that exists for the job; created is True only
        when this call inserted it

    Raises:
        InvoiceLookupError: the existence check failed
        AmountOutOfRangeError: total_amount is NaN or infinite
        InvoiceInsertError: the insert failed
    """
    if not math.isfinite(total_amount):
        logger.warning(f"Refusing to invoice job {job_id} with non-finite total {total_amount!r}")
        raise AmountOutOfRangeError()

    existing = await _find_invoice_for_job(session, job_id)
    if existing is not None:
        logger.debug(f"Invoice {existing.id} already exists for job {job_id}")
        return _to_ref(existing, created=False)

    issued = invoice_date or date.today()
    days = settings.INVOICE_DUE_DAYS if due_days is None else due_days
    now = datetime.utcnow()
    values = {
        "id": str(uuid.uuid4()),
        "job_id": job_id,
        "subcontractor_id": subcontractor_id,
        "total_amount": to_decimal(total_amount),
        "invoice_date": issued,
        "due_date": issued + timedelta(days=days),
        "status": InvoiceStatus.UNPAID.value,
        "created_at": now,
        "updated_at": now,
    }

    try:
        await session.execute(_insert_ignoring_duplicates(session, values))
        await session.commit()
    except IntegrityError as e:
        # Only reachable on dialects without ON CONFLICT support
        await session.rollback()
        logger.info(f"Invoice for job {job_id} was created concurrently: {e}")
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Error creating invoice for job {job_id}: {e}", exc_info=True)
        raise InvoiceInsertError(job_id, e) from e

    invoice = await _find_invoice_for_job(session, job_id)
    if invoice is None:
        raise InvoiceInsertError(job_id, RuntimeError("invoice row missing after insert"))

    created = invoice.id == values["id"]
    if created:
        logger.info(f"Created invoice {invoice.id} for job {job_id} (total {amount_to_wire(values['total_amount'])})")
    else:
        logger.info(f"Invoice {invoice.id} for job {job_id} was created by a concurrent request")
    return _to_ref(invoice, created=created)
