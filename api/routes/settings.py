"""API routes for profile and invoice settings"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.dependencies import get_current_caller, require_admin
from billing.models.database import get_db
from billing.models.invoice import InvoiceSettingsUpdate
from billing.models.job import Profile, ProfileUpdate
from billing.services.db_service import DatabaseService, RECIPIENT_TEXT_KEY

logger = logging.getLogger(__name__)

router = APIRouter(tags=["settings"])


@router.get("/profile", response_model=Profile)
async def get_profile(caller: Profile = Depends(get_current_caller)):
    return caller


@router.post("/subcontractor/settings/update")
async def update_profile(
    request: ProfileUpdate,
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
):
    """Update the caller's company details"""
    profile = await DatabaseService.update_profile(caller.id, request, db)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": profile.model_dump(mode="json"),
    }


@router.get("/admin/settings/invoice")
async def get_invoice_settings(
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return {"recipient_text": await DatabaseService.get_recipient_text(db)}


@router.put("/admin/settings/invoice")
async def update_invoice_settings(
    request: InvoiceSettingsUpdate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Change the salutation printed on every invoice"""
    value = await DatabaseService.set_setting(RECIPIENT_TEXT_KEY, request.recipient_text, db)
    logger.info(f"Admin {admin.id} updated invoice recipient text")
    return {"success": True, "recipient_text": value}
