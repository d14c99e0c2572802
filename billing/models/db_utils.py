"""Utilities for converting between SQLAlchemy rows and Pydantic models"""

from typing import Any, List, Optional

from .db_models import (
    Invoice as InvoiceDB,
    Job as JobDB,
    Notification as NotificationDB,
    Profile as ProfileDB,
)
from .invoice import Invoice as InvoicePydantic, InvoiceStatus
from .job import Job as JobPydantic, JobLineItemIn, JobStatus, Profile as ProfilePydantic, ProfileRole
from .notification import Notification as NotificationPydantic, NotificationType


def line_items_to_json(line_items: Optional[List[JobLineItemIn]]) -> Optional[list]:
    """Store submitted line items using the canonical field names"""
    if line_items is None:
        return None
    return [
        {
            "description": item.description,
            "quantity": item.quantity,
            "unit_price": item.unit_price,
        }
        for item in line_items
    ]


def db_to_pydantic_profile(profile_db: ProfileDB) -> ProfilePydantic:
    return ProfilePydantic(
        id=profile_db.id,
        company_name=profile_db.company_name,
        contact_person=profile_db.contact_person,
        phone_number=profile_db.phone_number,
        address=profile_db.address,
        role=ProfileRole(profile_db.role or ProfileRole.SUBCONTRACTOR.value),
        created_at=profile_db.created_at,
        updated_at=profile_db.updated_at,
    )


def db_to_pydantic_job(job_db: JobDB) -> JobPydantic:
    """line_items is passed through untouched; normalization happens at billing time"""
    return JobPydantic(
        id=job_db.id,
        subcontractor_id=job_db.subcontractor_id,
        job_type=job_db.job_type,
        location=job_db.location,
        start_date=job_db.start_date,
        end_date=job_db.end_date,
        status=JobStatus(job_db.status),
        notes=job_db.notes,
        line_items=job_db.line_items,
        unit=job_db.unit,
        unit_price=job_db.unit_price,
        total=job_db.total,
        created_at=job_db.created_at,
        updated_at=job_db.updated_at,
    )


def db_to_pydantic_invoice(invoice_db: InvoiceDB) -> InvoicePydantic:
    return InvoicePydantic(
        id=invoice_db.id,
        job_id=invoice_db.job_id,
        subcontractor_id=invoice_db.subcontractor_id,
        invoice_date=invoice_db.invoice_date,
        due_date=invoice_db.due_date,
        status=InvoiceStatus(invoice_db.status),
        total_amount=invoice_db.total_amount,
        created_at=invoice_db.created_at,
        updated_at=invoice_db.updated_at,
    )


def db_to_pydantic_notification(notification_db: NotificationDB) -> NotificationPydantic:
    return NotificationPydantic(
        id=notification_db.id,
        recipient_id=notification_db.recipient_id,
        title=notification_db.title,
        message=notification_db.message,
        type=NotificationType(notification_db.type),
        read=bool(notification_db.read),
        job_id=notification_db.job_id,
        created_at=notification_db.created_at,
        updated_at=notification_db.updated_at,
    )


def apply_updates(row: Any, updates: dict) -> None:
    """Copy updated values onto an ORM row"""
    for key, value in updates.items():
        setattr(row, key, value)
