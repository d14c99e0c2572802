"""Job visibility predicates supplied by callers of the invoice pipeline.

Administrators see every job; subcontractors only the jobs they own. The
predicate is applied to the job SELECT so an out-of-scope job is simply not
found.
"""

from typing import Callable

from sqlalchemy import Select

from billing.models.db_models import Job as JobDB

JobScope = Callable[[Select], Select]


def any_job(query: Select) -> Select:
    return query


def owned_by(subcontractor_id: str) -> JobScope:
    def _scope(query: Select) -> Select:
        return query.where(JobDB.subcontractor_id == subcontractor_id)
    return _scope
