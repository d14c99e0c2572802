"""Job and profile data models"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional
from pydantic import BaseModel, Field
from enum import Enum


class JobStatus(str, Enum):
    """Job lifecycle states (pending -> in-progress -> completed, gated by the UI)"""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class ProfileRole(str, Enum):
    ADMIN = "admin"
    SUBCONTRACTOR = "subcontractor"


class Profile(BaseModel):
    """Subcontractor or administrator profile"""
    id: str
    company_name: str
    contact_person: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    role: ProfileRole = ProfileRole.SUBCONTRACTOR
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ProfileRole.ADMIN


class SubcontractorSummary(Profile):
    """Subcontractor profile with job statistics for the admin overview"""
    job_count: int = 0
    completed_jobs: int = 0
    active_jobs: int = 0
    total_invoiced: Decimal = Decimal("0")


class SubcontractorPage(BaseModel):
    items: List[SubcontractorSummary]
    total: int
    skip: int
    limit: int


class ProfileUpdate(BaseModel):
    """Self-service profile update"""
    company_name: str = Field(min_length=2)
    contact_person: Optional[str] = Field(default=None, min_length=2)
    phone_number: Optional[str] = Field(default=None, min_length=5)
    address: Optional[str] = Field(default=None, min_length=5)


class Job(BaseModel):
    """Job as stored; line_items is the raw, loosely typed payload"""
    id: str
    subcontractor_id: str
    job_type: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: JobStatus = JobStatus.PENDING
    notes: Optional[str] = None
    line_items: Any = None
    # Legacy single-item fields
    unit: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None
    total: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JobLineItemIn(BaseModel):
    """Line item as submitted by a subcontractor"""
    description: str = Field(min_length=1)
    quantity: float = Field(default=0, allow_inf_nan=False)
    unit_price: float = Field(default=0, allow_inf_nan=False)


class JobCreate(BaseModel):
    job_type: Optional[str] = None
    location: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    line_items: List[JobLineItemIn] = Field(default_factory=list)


class JobUpdate(BaseModel):
    """Partial update of a pending job; unset fields are left alone"""
    job_type: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    line_items: Optional[List[JobLineItemIn]] = None


class JobStatusUpdate(BaseModel):
    status: JobStatus
