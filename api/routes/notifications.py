"""API routes for the caller's notifications"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from api.dependencies import get_current_caller
from billing.models.database import get_db
from billing.models.job import Profile
from billing.models.notification import (
    Notification,
    NotificationBulkDelete,
    NotificationDelete,
    NotificationReadUpdate,
)
from billing.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[Notification])
async def list_notifications(
    unread_only: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
):
    return await NotificationService.list_notifications(db, caller.id, unread_only=unread_only, limit=limit)


@router.post("/update")
async def update_notification(
    request: NotificationReadUpdate,
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
):
    """Mark one notification read or unread"""
    await NotificationService.set_read(db, request.notification_id, caller.id, request.read)
    state = "marked as read" if request.read else "marked as unread"
    return {"success": True, "message": f"Notification {state} successfully"}


@router.post("/mark-all-read")
async def mark_all_read(
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
):
    updated = await NotificationService.mark_all_read(db, caller.id)
    return {
        "success": True,
        "message": "All notifications marked as read successfully",
        "updated_count": updated,
    }


@router.post("/delete")
async def delete_notification(
    request: NotificationDelete,
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
):
    await NotificationService.delete(db, request.notification_id, caller.id)
    return {"success": True, "message": "Notification deleted successfully"}


@router.post("/bulk-delete")
async def bulk_delete_notifications(
    request: NotificationBulkDelete,
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
):
    """Delete several notifications; ids belonging to other users are skipped"""
    deleted_ids = await NotificationService.bulk_delete(db, request.notification_ids, caller.id)
    return {
        "success": True,
        "message": f"{len(deleted_ids)} notification(s) deleted successfully",
        "deleted_count": len(deleted_ids),
        "deleted_ids": deleted_ids,
    }
