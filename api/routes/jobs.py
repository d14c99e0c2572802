"""API routes for job submission and administration"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from api.dependencies import caller_scope, get_current_caller, require_admin
from billing.exceptions import JobNotFoundError
from billing.models.database import get_db
from billing.models.job import Job, JobCreate, JobStatus, JobStatusUpdate, JobUpdate, Profile
from billing.services.db_service import DatabaseService
from billing.services.job_service import JobService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["jobs"])


def get_job_service() -> JobService:
    return JobService()


@router.get("/jobs", response_model=List[Job])
async def list_jobs(
    status: Optional[JobStatus] = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
):
    """List jobs visible to the caller, newest first"""
    return await DatabaseService.list_jobs(db, caller_scope(caller), status=status, skip=skip, limit=limit)


@router.post("/jobs", response_model=Job, status_code=201)
async def create_job(
    request: JobCreate,
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
    job_service: JobService = Depends(get_job_service),
):
    """Submit a new job for review"""
    return await job_service.create_job(db, caller.id, request)


@router.get("/jobs/{job_id}", response_model=Job)
async def get_job(
    job_id: str,
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
):
    job = await DatabaseService.get_job(job_id, db, caller_scope(caller))
    if not job:
        raise JobNotFoundError(job_id)
    return job


@router.put("/jobs/{job_id}", response_model=Job)
async def update_job(
    job_id: str,
    request: JobUpdate,
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
    job_service: JobService = Depends(get_job_service),
):
    """Edit one of the caller's jobs while it is still pending"""
    return await job_service.update_job(db, job_id, caller.id, request)


@router.delete("/jobs/{job_id}")
async def delete_job(
    job_id: str,
    caller: Profile = Depends(get_current_caller),
    db: AsyncSession = Depends(get_db),
    job_service: JobService = Depends(get_job_service),
):
    """Delete one of the caller's jobs while it is still pending"""
    await job_service.delete_job(db, job_id, caller.id)
    return {"success": True, "message": "Job deleted successfully", "job_id": job_id}


@router.patch("/admin/jobs/{job_id}/status", response_model=Job)
async def update_job_status(
    job_id: str,
    request: JobStatusUpdate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    job_service: JobService = Depends(get_job_service),
):
    """Move a job between pending, in-progress and completed"""
    logger.info(f"Admin {admin.id} setting job {job_id} to {request.status.value}")
    return await job_service.update_job_status(db, job_id, request)
