"""Invoice data models"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from enum import Enum


class InvoiceStatus(str, Enum):
    """Invoice states; administrators may move between any of them"""
    UNPAID = "unpaid"
    PAID = "paid"
    OVERDUE = "overdue"


class NormalizedLineItem(BaseModel):
    """Canonical line item shape produced by normalize_line_items"""
    description: str
    quantity: float = Field(default=0, allow_inf_nan=False)
    unit_price: float = Field(default=0, allow_inf_nan=False)


class Invoice(BaseModel):
    id: str
    job_id: str
    subcontractor_id: str
    invoice_date: date
    due_date: Optional[date] = None
    status: InvoiceStatus = InvoiceStatus.UNPAID
    total_amount: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InvoiceRef(BaseModel):
    """Result of ensure_invoice: the invoice that exists for a job"""
    id: str
    job_id: str
    status: InvoiceStatus
    total_amount: Decimal
    created: bool = False


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceSettingsUpdate(BaseModel):
    recipient_text: str


class InvoiceDocument(BaseModel):
    """Rendered invoice ready to be sent to the client"""
    job_id: str
    filename: str
    content: bytes
    total_amount: float
    line_items: List[NormalizedLineItem]
    invoice: Optional[InvoiceRef] = None

    @property
    def media_type(self) -> str:
        return "application/pdf"
