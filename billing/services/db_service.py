"""Async database service for profiles, jobs, invoices and invoice settings"""

from typing import Optional, List, Tuple
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import case, delete, func, or_, select, update
import logging

from billing.access import JobScope, any_job
from billing.config import settings
from billing.exceptions import InvalidRequestError, InvoiceNotFoundError, ProfileNotFoundError
from billing.models.db_models import (
    Invoice as InvoiceDB,
    InvoiceSetting as InvoiceSettingDB,
    Job as JobDB,
    Notification as NotificationDB,
    Profile as ProfileDB,
)
from billing.models.db_utils import (
    apply_updates,
    db_to_pydantic_invoice,
    db_to_pydantic_job,
    db_to_pydantic_profile,
)
from billing.models.invoice import Invoice, InvoiceStatus
from billing.models.job import Job, JobStatus, Profile, ProfileRole, ProfileUpdate, SubcontractorSummary
from billing.models.money import to_decimal
from billing.models.notification import NotificationType
from billing.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

RECIPIENT_TEXT_KEY = "invoice_recipient_text"


class DatabaseService:
    """Async service for database operations"""

    # --- Profiles ------------------------------------------------------------

    @staticmethod
    async def get_profile(profile_id: str, db: AsyncSession) -> Optional[Profile]:
        result = await db.execute(select(ProfileDB).where(ProfileDB.id == profile_id))
        profile_db = result.scalar_one_or_none()
        return db_to_pydantic_profile(profile_db) if profile_db else None

    @staticmethod
    async def update_profile(profile_id: str, update: ProfileUpdate, db: AsyncSession) -> Profile:
        result = await db.execute(select(ProfileDB).where(ProfileDB.id == profile_id))
        profile_db = result.scalar_one_or_none()
        if not profile_db:
            raise ProfileNotFoundError(profile_id)

        apply_updates(profile_db, update.model_dump())
        profile_db.updated_at = datetime.utcnow()
        try:
            await db.commit()
            await db.refresh(profile_db)
        except Exception as e:
            await db.rollback()
            logger.error(f"Error updating profile {profile_id}: {e}", exc_info=True)
            raise

        logger.info(f"Profile updated: {profile_id}")
        return db_to_pydantic_profile(profile_db)

    @staticmethod
    async def set_profile_role(profile_id: str, role: ProfileRole, db: AsyncSession) -> Profile:
        """Change a profile's role. Used by the admin seeding script, never by request handlers."""
        result = await db.execute(select(ProfileDB).where(ProfileDB.id == profile_id))
        profile_db = result.scalar_one_or_none()
        if not profile_db:
            raise ProfileNotFoundError(profile_id)

        profile_db.role = role.value
        profile_db.updated_at = datetime.utcnow()
        await db.commit()
        await db.refresh(profile_db)
        logger.info(f"Profile {profile_id} role set to {role.value}")
        return db_to_pydantic_profile(profile_db)

    # --- Subcontractor administration ---------------------------------------

    @staticmethod
    async def list_subcontractors(
        db: AsyncSession,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[SubcontractorSummary], int]:
        """
        Page through subcontractors by company name, with job statistics.

        Args:
            search: Case-insensitive match on company name or contact person
            skip: Rows to skip
            limit: Page size

        Returns:
            (page of subcontractors, total matching subcontractors)
        """
        filters = [ProfileDB.role == ProfileRole.SUBCONTRACTOR.value]
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            filters.append(or_(
                ProfileDB.company_name.ilike(pattern),
                ProfileDB.contact_person.ilike(pattern),
            ))

        total = (await db.execute(
            select(func.count()).select_from(ProfileDB).where(*filters)
        )).scalar_one()

        query = (
            select(
                ProfileDB,
                func.count(JobDB.id).label("job_count"),
                func.sum(case((JobDB.status == JobStatus.COMPLETED.value, 1), else_=0)).label("completed_jobs"),
                func.sum(case((JobDB.status == JobStatus.IN_PROGRESS.value, 1), else_=0)).label("active_jobs"),
                func.coalesce(func.sum(JobDB.total), 0).label("total_invoiced"),
            )
            .outerjoin(JobDB, JobDB.subcontractor_id == ProfileDB.id)
            .where(*filters)
            .group_by(ProfileDB.id)
            .order_by(ProfileDB.company_name, ProfileDB.id)
            .offset(skip)
            .limit(limit)
        )
        rows = (await db.execute(query)).all()

        items = [
            SubcontractorSummary(
                **db_to_pydantic_profile(row[0]).model_dump(),
                job_count=row.job_count,
                completed_jobs=row.completed_jobs or 0,
                active_jobs=row.active_jobs or 0,
                total_invoiced=to_decimal(row.total_invoiced or 0),
            )
            for row in rows
        ]
        return items, total

    @staticmethod
    async def delete_subcontractor(profile_id: str, db: AsyncSession) -> str:
        """
        Delete a subcontractor with their jobs, invoices and notifications.

        Returns:
            The deleted subcontractor's company name

        Raises:
            ProfileNotFoundError: no profile with this id
            InvalidRequestError: the profile is not a subcontractor
        """
        result = await db.execute(select(ProfileDB).where(ProfileDB.id == profile_id))
        profile_db = result.scalar_one_or_none()
        if not profile_db:
            raise ProfileNotFoundError(profile_id)
        if profile_db.role != ProfileRole.SUBCONTRACTOR.value:
            raise InvalidRequestError("The specified user is not a subcontractor")

        company_name = profile_db.company_name
        job_ids = select(JobDB.id).where(JobDB.subcontractor_id == profile_id)
        try:
            # Explicit order; SQLite does not enforce the ON DELETE clauses
            await db.execute(
                update(NotificationDB).where(NotificationDB.job_id.in_(job_ids)).values(job_id=None)
            )
            await db.execute(delete(NotificationDB).where(NotificationDB.recipient_id == profile_id))
            await db.execute(delete(InvoiceDB).where(InvoiceDB.subcontractor_id == profile_id))
            await db.execute(delete(JobDB).where(JobDB.subcontractor_id == profile_id))
            await db.execute(delete(ProfileDB).where(ProfileDB.id == profile_id))
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error deleting subcontractor {profile_id}: {e}", exc_info=True)
            raise

        logger.info(f"Subcontractor deleted: {profile_id} ({company_name})")
        return company_name

    # --- Jobs ----------------------------------------------------------------

    @staticmethod
    async def get_job_row(job_id: str, db: AsyncSession, scope: JobScope = any_job) -> Optional[JobDB]:
        result = await db.execute(scope(select(JobDB).where(JobDB.id == job_id)))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_job(job_id: str, db: AsyncSession, scope: JobScope = any_job) -> Optional[Job]:
        """
        Get a job visible under scope

        Args:
            job_id: Job ID
            db: Async database session
            scope: Access predicate (any_job for admins, owned_by(id) for subcontractors)

        Returns:
            Job or None when missing or out of scope
        """
        job_db = await DatabaseService.get_job_row(job_id, db, scope)
        return db_to_pydantic_job(job_db) if job_db else None

    @staticmethod
    async def list_jobs(
        db: AsyncSession,
        scope: JobScope = any_job,
        status: Optional[JobStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Job]:
        query = scope(select(JobDB))
        if status:
            query = query.where(JobDB.status == status.value)
        query = query.order_by(JobDB.created_at.desc()).offset(skip).limit(limit)

        result = await db.execute(query)
        return [db_to_pydantic_job(j) for j in result.scalars().all()]

    # --- Invoices ------------------------------------------------------------

    @staticmethod
    async def list_invoices(
        db: AsyncSession,
        subcontractor_id: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Invoice]:
        """
        List invoices, newest first

        Args:
            subcontractor_id: Restrict to one subcontractor (None lists all)
            status: Optional status filter
        """
        query = select(InvoiceDB)
        if subcontractor_id:
            query = query.where(InvoiceDB.subcontractor_id == subcontractor_id)
        if status:
            query = query.where(InvoiceDB.status == status.value)
        query = query.order_by(InvoiceDB.invoice_date.desc(), InvoiceDB.created_at.desc())
        query = query.offset(skip).limit(limit)

        result = await db.execute(query)
        return [db_to_pydantic_invoice(inv) for inv in result.scalars().all()]

    @staticmethod
    async def update_invoice_status(invoice_id: str, status: InvoiceStatus, db: AsyncSession) -> Invoice:
        """
        Set an invoice's status. Any status may follow any other.

        Marking an invoice paid notifies the subcontractor.
        """
        result = await db.execute(select(InvoiceDB).where(InvoiceDB.id == invoice_id))
        invoice_db = result.scalar_one_or_none()
        if not invoice_db:
            raise InvoiceNotFoundError(invoice_id)

        previous = invoice_db.status
        invoice_db.status = status.value
        invoice_db.updated_at = datetime.utcnow()

        if status == InvoiceStatus.PAID and previous != InvoiceStatus.PAID.value:
            NotificationService.queue(
                db,
                invoice_db.subcontractor_id,
                title="Payment processed",
                message=f"Invoice for job {invoice_db.job_id} has been marked as paid.",
                type=NotificationType.PAYMENT_PROCESSED,
                job_id=invoice_db.job_id,
            )

        try:
            await db.commit()
            await db.refresh(invoice_db)
        except Exception as e:
            await db.rollback()
            logger.error(f"Error updating invoice status {invoice_id}: {e}", exc_info=True)
            raise

        logger.info(f"Invoice {invoice_id} status {previous} -> {status.value}")
        return db_to_pydantic_invoice(invoice_db)

    # --- Invoice settings ----------------------------------------------------

    @staticmethod
    async def get_setting(key: str, db: AsyncSession) -> Optional[str]:
        result = await db.execute(
            select(InvoiceSettingDB.setting_value).where(InvoiceSettingDB.setting_key == key)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def set_setting(key: str, value: str, db: AsyncSession) -> str:
        result = await db.execute(select(InvoiceSettingDB).where(InvoiceSettingDB.setting_key == key))
        setting = result.scalar_one_or_none()
        if setting:
            setting.setting_value = value
            setting.updated_at = datetime.utcnow()
        else:
            db.add(InvoiceSettingDB(setting_key=key, setting_value=value))
        try:
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error saving setting {key}: {e}", exc_info=True)
            raise
        return value

    @staticmethod
    async def get_recipient_text(db: AsyncSession) -> str:
        """Invoice salutation; falls back to the configured default when unset or blank"""
        value = await DatabaseService.get_setting(RECIPIENT_TEXT_KEY, db)
        if value and value.strip():
            return value
        return settings.INVOICE_DEFAULT_RECIPIENT_TEXT
