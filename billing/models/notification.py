"""Notification data models"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from enum import Enum


class NotificationType(str, Enum):
    JOB_SUBMISSION = "job_submission"
    INVOICE_REQUEST = "invoice_request"
    SYSTEM = "system"
    ALERT = "alert"
    PAYMENT_PROCESSED = "payment_processed"


class Notification(BaseModel):
    id: str
    recipient_id: str
    title: str
    message: str
    type: NotificationType = NotificationType.SYSTEM
    read: bool = False
    job_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NotificationReadUpdate(BaseModel):
    notification_id: str
    read: bool


class NotificationDelete(BaseModel):
    notification_id: str


class NotificationBulkDelete(BaseModel):
    notification_ids: List[str] = Field(default_factory=list)
