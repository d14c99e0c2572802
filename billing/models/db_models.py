"""SQLAlchemy ORM models"""

from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Numeric, Text, JSON, ForeignKey, Index, UniqueConstraint,
)
from datetime import date, datetime
import uuid

from .database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Profile(Base):
    """Subcontractor or administrator identity (id is the auth identity)"""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=_uuid)
    company_name = Column(String, nullable=False)
    contact_person = Column(String, nullable=True)
    phone_number = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    role = Column(String(20), nullable=False, default="subcontractor")

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_profiles_role', 'role'),
    )


class Job(Base):
    """Unit of work submitted by a subcontractor"""
    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=_uuid)
    subcontractor_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    job_type = Column(String, nullable=True)
    location = Column(String, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    notes = Column(Text, nullable=True)

    # Loosely typed payload: list, single object or null
    line_items = Column(JSON, nullable=True)

    # Legacy single-item carryover fields
    unit = Column(Numeric(18, 4), nullable=True)
    unit_price = Column(Numeric(18, 2), nullable=True)
    total = Column(Numeric(18, 2), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_jobs_subcontractor_id', 'subcontractor_id'),
        Index('ix_jobs_status', 'status'),
        Index('ix_jobs_created_at', 'created_at'),
    )


class Invoice(Base):
    """Billing record, at most one per job"""
    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=_uuid)
    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    subcontractor_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    invoice_date = Column(Date, nullable=False, default=date.today)
    due_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="unpaid")
    total_amount = Column(Numeric(18, 2), nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('job_id', name='uq_invoices_job_id'),
        Index('ix_invoices_status', 'status'),
        Index('ix_invoices_subcontractor_id', 'subcontractor_id'),
        Index('ix_invoices_invoice_date', 'invoice_date'),
    )


class Notification(Base):
    """In-app notification addressed to one profile"""
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_uuid)
    recipient_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False, default="system")
    read = Column(Boolean, nullable=False, default=False)
    job_id = Column(String(36), ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_notifications_recipient_read', 'recipient_id', 'read'),
        Index('ix_notifications_created_at', 'created_at'),
    )


class InvoiceSetting(Base):
    """Key/value invoice settings (e.g. invoice_recipient_text)"""
    __tablename__ = "invoice_settings"

    id = Column(String(36), primary_key=True, default=_uuid)
    setting_key = Column(String(100), nullable=False)
    setting_value = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('setting_key', name='uq_invoice_settings_key'),
    )
