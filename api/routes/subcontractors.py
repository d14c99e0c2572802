"""API routes for administrator management of subcontractors"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from api.dependencies import require_admin
from billing.models.database import get_db
from billing.models.job import Profile, SubcontractorPage
from billing.services.db_service import DatabaseService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["subcontractors"])


@router.get("/admin/subcontractors", response_model=SubcontractorPage)
async def list_subcontractors(
    search: Optional[str] = Query(default=None, description="Company name or contact person"),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=10, ge=1, le=100),
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Subcontractors ordered by company name, with job counts and totals"""
    items, total = await DatabaseService.list_subcontractors(db, search=search, skip=skip, limit=limit)
    return SubcontractorPage(items=items, total=total, skip=skip, limit=limit)


@router.delete("/admin/subcontractors/{subcontractor_id}")
async def delete_subcontractor(
    subcontractor_id: str,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a subcontractor together with their jobs, invoices and notifications"""
    company_name = await DatabaseService.delete_subcontractor(subcontractor_id, db)
    logger.info(f"Admin {admin.id} deleted subcontractor {subcontractor_id}")
    return {
        "success": True,
        "message": f"Subcontractor {company_name} has been deleted successfully",
    }
