"""Notification persistence. Delivery (email/push) is handled elsewhere."""

from typing import List, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
import logging

from billing.exceptions import (
    InvalidRequestError,
    NotificationNotFoundError,
    PermissionDeniedError,
)
from billing.models.db_models import Notification as NotificationDB, Profile as ProfileDB
from billing.models.db_utils import db_to_pydantic_notification
from billing.models.job import ProfileRole
from billing.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationService:
    """Create and manage in-app notifications for one recipient at a time"""

    @staticmethod
    def queue(
        db: AsyncSession,
        recipient_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.SYSTEM,
        job_id: Optional[str] = None,
    ) -> NotificationDB:
        """Add a notification to the session; the caller commits it with its own change"""
        notification = NotificationDB(
            recipient_id=recipient_id,
            title=title,
            message=message,
            type=type.value,
            read=False,
            job_id=job_id,
        )
        db.add(notification)
        return notification

    @staticmethod
    async def queue_for_admins(
        db: AsyncSession,
        title: str,
        message: str,
        type: NotificationType = NotificationType.SYSTEM,
        job_id: Optional[str] = None,
    ) -> int:
        result = await db.execute(
            select(ProfileDB.id).where(ProfileDB.role == ProfileRole.ADMIN.value)
        )
        admin_ids = list(result.scalars().all())
        for admin_id in admin_ids:
            NotificationService.queue(db, admin_id, title, message, type=type, job_id=job_id)
        return len(admin_ids)

    @staticmethod
    async def list_notifications(
        db: AsyncSession,
        recipient_id: str,
        unread_only: bool = False,
        limit: int = 50,
    ) -> List[Notification]:
        query = select(NotificationDB).where(NotificationDB.recipient_id == recipient_id)
        if unread_only:
            query = query.where(NotificationDB.read.is_(False))
        query = query.order_by(NotificationDB.created_at.desc()).limit(limit)

        result = await db.execute(query)
        return [db_to_pydantic_notification(n) for n in result.scalars().all()]

    @staticmethod
    async def _get_owned(db: AsyncSession, notification_id: str, recipient_id: str) -> NotificationDB:
        result = await db.execute(
            select(NotificationDB).where(NotificationDB.id == notification_id)
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotificationNotFoundError(notification_id)
        if notification.recipient_id != recipient_id:
            raise PermissionDeniedError("You do not have permission to access this notification")
        return notification

    @staticmethod
    async def set_read(
        db: AsyncSession,
        notification_id: str,
        recipient_id: str,
        read: bool,
    ) -> Notification:
        notification = await NotificationService._get_owned(db, notification_id, recipient_id)
        notification.read = read
        notification.updated_at = datetime.utcnow()
        try:
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error updating notification {notification_id}: {e}", exc_info=True)
            raise
        return db_to_pydantic_notification(notification)

    @staticmethod
    async def mark_all_read(db: AsyncSession, recipient_id: str) -> int:
        try:
            result = await db.execute(
                update(NotificationDB)
                .where(NotificationDB.recipient_id == recipient_id, NotificationDB.read.is_(False))
                .values(read=True, updated_at=datetime.utcnow())
            )
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error marking notifications read for {recipient_id}: {e}", exc_info=True)
            raise
        return result.rowcount or 0

    @staticmethod
    async def delete(db: AsyncSession, notification_id: str, recipient_id: str) -> None:
        notification = await NotificationService._get_owned(db, notification_id, recipient_id)
        try:
            await db.delete(notification)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error deleting notification {notification_id}: {e}", exc_info=True)
            raise

    @staticmethod
    async def bulk_delete(db: AsyncSession, notification_ids: List[str], recipient_id: str) -> List[str]:
        """
        Delete the caller's notifications among notification_ids.

        Ids that do not exist or belong to someone else are skipped.

        Returns:
            Ids that were deleted
        """
        if not notification_ids:
            raise InvalidRequestError("Valid notification IDs array is required")

        result = await db.execute(
            select(NotificationDB.id).where(
                NotificationDB.id.in_(notification_ids),
                NotificationDB.recipient_id == recipient_id,
            )
        )
        owned_ids = list(result.scalars().all())
        if not owned_ids:
            raise NotificationNotFoundError()
        if len(owned_ids) != len(set(notification_ids)):
            logger.info(
                f"Bulk delete for {recipient_id}: {len(owned_ids)} of {len(notification_ids)} ids are deletable"
            )

        try:
            await db.execute(delete(NotificationDB).where(NotificationDB.id.in_(owned_ids)))
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error bulk deleting notifications for {recipient_id}: {e}", exc_info=True)
            raise
        return owned_ids
