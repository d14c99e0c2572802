"""Request-scoped dependencies: caller identity and role checks.

Authentication itself happens upstream; the gateway forwards the
authenticated user id in the X-User-Id header.
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from billing.access import JobScope, any_job, owned_by
from billing.exceptions import AuthenticationRequiredError, PermissionDeniedError
from billing.models.database import get_db
from billing.models.job import Profile
from billing.services.db_service import DatabaseService


async def get_current_caller(
    x_user_id: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationRequiredError()
    profile = await DatabaseService.get_profile(x_user_id.strip(), db)
    if not profile:
        raise AuthenticationRequiredError()
    return profile


async def require_admin(caller: Profile = Depends(get_current_caller)) -> Profile:
    if not caller.is_admin:
        raise PermissionDeniedError("Administrator access required")
    return caller


def caller_scope(caller: Profile) -> JobScope:
    """Admins see every job, subcontractors only their own"""
    return any_job if caller.is_admin else owned_by(caller.id)
