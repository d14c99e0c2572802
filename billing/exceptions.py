"""
Typed exceptions for the billing service.

Every error carries a machine-readable ``code`` and the HTTP ``status_code``
the API layer answers with, so route handlers catch by type instead of
parsing messages.

    BillingError
    |
    +-- NotFoundError                 404
    |   +-- JobNotFoundError
    |   +-- ProfileNotFoundError
    |   +-- InvoiceNotFoundError
    |   +-- NotificationNotFoundError
    |
    +-- AuthenticationRequiredError   401
    +-- PermissionDeniedError         403
    +-- InvalidRequestError           400
    +-- JobNotEditableError           409
    +-- AmountOutOfRangeError         422
    |
    +-- PersistenceError              500
    |   +-- InvoiceLookupError
    |   +-- InvoiceInsertError
    |
    +-- RenderingError                500

Malformed line items are deliberately absent: normalization degrades to
zero-valued records and logs a warning instead of raising. Only a total
that overflows the float range is refused, before anything is stored.
"""

from typing import Optional


class BillingError(Exception):
    """Base class for all billing service errors."""

    code: str = "BILLING_ERROR"
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def public_message(self) -> str:
        """Message that is safe to return to API clients."""
        return self.message


class NotFoundError(BillingError):
    code = "NOT_FOUND"
    status_code = 404


class JobNotFoundError(NotFoundError):
    code = "JOB_NOT_FOUND"

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job {job_id} not found or you do not have permission to access it")


class ProfileNotFoundError(NotFoundError):
    code = "PROFILE_NOT_FOUND"

    def __init__(self, profile_id: str):
        self.profile_id = profile_id
        super().__init__(f"Subcontractor profile {profile_id} not found")


class InvoiceNotFoundError(NotFoundError):
    code = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice {invoice_id} not found")


class NotificationNotFoundError(NotFoundError):
    code = "NOTIFICATION_NOT_FOUND"

    def __init__(self, notification_id: Optional[str] = None):
        self.notification_id = notification_id
        if notification_id:
            super().__init__(f"Notification {notification_id} not found")
        else:
            super().__init__("No valid notifications found")


class AuthenticationRequiredError(BillingError):
    code = "AUTHENTICATION_REQUIRED"
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class PermissionDeniedError(BillingError):
    code = "PERMISSION_DENIED"
    status_code = 403


class InvalidRequestError(BillingError):
    code = "INVALID_REQUEST"
    status_code = 400


class JobNotEditableError(BillingError):
    code = "JOB_NOT_EDITABLE"
    status_code = 409

    def __init__(self, job_id: str, status: str):
        self.job_id = job_id
        self.status = status
        super().__init__(f"Only jobs with 'pending' status can be changed (job {job_id} is '{status}')")


class AmountOutOfRangeError(BillingError):
    """Line item total cannot be represented (float overflow)."""

    code = "AMOUNT_OUT_OF_RANGE"
    status_code = 422

    def __init__(self, message: str = "Line item total is too large to invoice"):
        super().__init__(message)


class PersistenceError(BillingError):
    """Storage read/write failure. The underlying detail is logged, not returned."""

    code = "PERSISTENCE_ERROR"
    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)

    @property
    def public_message(self) -> str:
        return "A storage error occurred while processing the request"


class InvoiceLookupError(PersistenceError):
    code = "INVOICE_LOOKUP_FAILED"

    def __init__(self, job_id: str, cause: Optional[BaseException] = None):
        self.job_id = job_id
        super().__init__(f"Failed to look up invoice for job {job_id}: {cause}", cause)


class InvoiceInsertError(PersistenceError):
    code = "INVOICE_INSERT_FAILED"

    def __init__(self, job_id: str, cause: Optional[BaseException] = None):
        self.job_id = job_id
        super().__init__(f"Failed to create invoice for job {job_id}: {cause}", cause)


class RenderingError(BillingError):
    code = "RENDERING_FAILED"
    status_code = 500

    def __init__(self, job_id: str, cause: Optional[BaseException] = None):
        self.job_id = job_id
        self.cause = cause
        super().__init__(f"Error generating PDF for job {job_id}: {cause}")

    @property
    def public_message(self) -> str:
        return f"Error generating PDF for job {self.job_id}"
