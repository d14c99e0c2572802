"""Job submission and lifecycle operations"""

from typing import Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update
import logging

from billing.access import JobScope, any_job, owned_by
from billing.exceptions import BillingError, JobNotEditableError, JobNotFoundError
from billing.invoicing.line_items import calculate_total, normalize_line_items
from billing.models.db_models import Job as JobDB
from billing.models.db_utils import db_to_pydantic_job, line_items_to_json
from billing.models.job import Job, JobCreate, JobStatus, JobStatusUpdate, JobUpdate
from billing.models.money import to_decimal
from billing.models.notification import NotificationType
from billing.services.db_service import DatabaseService
from billing.services.invoice_service import InvoiceService
from billing.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def _legacy_fields(line_items: Optional[list]) -> dict:
    """unit/unit_price mirror a single-item job; total is always the computed total"""
    normalized = normalize_line_items(line_items)
    fields = {
        "unit": None,
        "unit_price": None,
        "total": to_decimal(calculate_total(normalized)),
    }
    if len(normalized) == 1:
        fields["unit"] = to_decimal(normalized[0].quantity)
        fields["unit_price"] = to_decimal(normalized[0].unit_price)
    return fields


class JobService:
    """Create, edit and progress jobs"""

    def __init__(self, invoice_service: Optional[InvoiceService] = None):
        self.invoice_service = invoice_service or InvoiceService()

    async def create_job(self, db: AsyncSession, subcontractor_id: str, payload: JobCreate) -> Job:
        """
        Submit a new job as pending and notify administrators

        The job type defaults to the first line item's description.
        """
        line_items = line_items_to_json(payload.line_items) or []
        job_type = payload.job_type or (payload.line_items[0].description if payload.line_items else None)

        job_db = JobDB(
            subcontractor_id=subcontractor_id,
            job_type=job_type,
            location=payload.location,
            start_date=payload.start_date,
            end_date=payload.end_date,
            status=JobStatus.PENDING.value,
            notes=payload.notes or None,
            line_items=line_items,
            **_legacy_fields(line_items),
        )
        db.add(job_db)

        try:
            await db.flush()
            notified = await NotificationService.queue_for_admins(
                db,
                title="New job submitted",
                message=f"A new job '{job_type or 'Untitled'}' at {payload.location} was submitted for review.",
                type=NotificationType.JOB_SUBMISSION,
                job_id=job_db.id,
            )
            await db.commit()
            await db.refresh(job_db)
        except Exception as e:
            await db.rollback()
            logger.error(f"Error creating job for {subcontractor_id}: {e}", exc_info=True)
            raise

        logger.info(f"Created job {job_db.id} for {subcontractor_id} ({notified} admins notified)")
        return db_to_pydantic_job(job_db)

    async def _get_pending_owned(self, db: AsyncSession, job_id: str, subcontractor_id: str) -> JobDB:
        job_db = await DatabaseService.get_job_row(job_id, db, owned_by(subcontractor_id))
        if not job_db:
            raise JobNotFoundError(job_id)
        if job_db.status != JobStatus.PENDING.value:
            raise JobNotEditableError(job_id, job_db.status)
        return job_db

    async def update_job(
        self,
        db: AsyncSession,
        job_id: str,
        subcontractor_id: str,
        payload: JobUpdate,
    ) -> Job:
        """Edit a pending job owned by the caller"""
        job_db = await self._get_pending_owned(db, job_id, subcontractor_id)

        values = payload.model_dump(exclude_unset=True, exclude={"line_items"})
        if payload.line_items is not None:
            values["line_items"] = line_items_to_json(payload.line_items)
            values.update(_legacy_fields(values["line_items"]))
        values["updated_at"] = datetime.utcnow()

        try:
            # status guard in the statement: a job approved meanwhile is left alone
            result = await db.execute(
                update(JobDB)
                .where(JobDB.id == job_id, JobDB.status == JobStatus.PENDING.value)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await db.rollback()
                raise JobNotEditableError(job_id, "no longer pending")
            await db.commit()
        except JobNotEditableError:
            raise
        except Exception as e:
            await db.rollback()
            logger.error(f"Error updating job {job_id}: {e}", exc_info=True)
            raise

        await db.refresh(job_db)
        logger.info(f"Updated job {job_id}")
        return db_to_pydantic_job(job_db)

    async def delete_job(self, db: AsyncSession, job_id: str, subcontractor_id: str) -> None:
        """Delete a pending job owned by the caller"""
        job_db = await self._get_pending_owned(db, job_id, subcontractor_id)
        try:
            await db.delete(job_db)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error deleting job {job_id}: {e}", exc_info=True)
            raise
        logger.info(f"Deleted job {job_id}")

    async def update_job_status(
        self,
        db: AsyncSession,
        job_id: str,
        payload: JobStatusUpdate,
        scope: JobScope = any_job,
    ) -> Job:
        """
        Administrator status change.

        Transitions are not restricted here. The owner is notified, and moving
        a job to completed materializes its invoice. A failure to create the
        invoice is logged and does not undo the committed status change.
        """
        job_db = await DatabaseService.get_job_row(job_id, db, scope)
        if not job_db:
            raise JobNotFoundError(job_id)

        previous = job_db.status
        job_db.status = payload.status.value
        job_db.updated_at = datetime.utcnow()

        if previous != payload.status.value:
            NotificationService.queue(
                db,
                job_db.subcontractor_id,
                title="Job status updated",
                message=f"Your job '{job_db.job_type or job_id}' is now {payload.status.value}.",
                type=NotificationType.SYSTEM,
                job_id=job_id,
            )

        try:
            await db.commit()
            await db.refresh(job_db)
        except Exception as e:
            await db.rollback()
            logger.error(f"Error updating job status {job_id}: {e}", exc_info=True)
            raise

        logger.info(f"Job {job_id} status {previous} -> {payload.status.value}")
        job = db_to_pydantic_job(job_db)

        if payload.status == JobStatus.COMPLETED:
            # The status change is committed; a missing invoice is created on first PDF request
            try:
                await self.invoice_service.materialize_for_job(db, job)
            except BillingError as e:
                logger.error(f"Job {job_id} completed but its invoice could not be created: {e}", exc_info=True)

        return job
