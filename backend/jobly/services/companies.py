"""Company data access."""
import logging
from typing import Any, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobly.database import run_sql
from jobly.errors import UNIQUE_VIOLATION, ConflictError, NotFoundError, constraint_violation
from jobly.schemas.company import CompanyCreate, CompanyDetail, CompanyResponse
from jobly.schemas.job import JobSummary
from jobly.services.jobs import normalize_equity
from jobly.services.sql import FilterTable, sql_for_filter, sql_for_partial_update

logger = logging.getLogger(__name__)

COMPANY_COLUMNS = 'handle, name, description, num_employees AS "numEmployees", logo_url AS "logoUrl"'

# Request field -> column, where they differ
COMPANY_JS_TO_SQL = {
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}


async def create_company(db: AsyncSession, data: CompanyCreate) -> CompanyResponse:
    """
    Create a company.

    Raises:
        ConflictError: If the handle or the name is already taken.
    """
    duplicate = await run_sql(
        db,
        "SELECT handle FROM companies WHERE handle = $1",
        [data.handle]
    )
    if duplicate.first():
        raise ConflictError(f"Duplicate company: {data.handle}")

    try:
        result = await run_sql(
            db,
            f"""INSERT INTO companies
                   (handle, name, description, num_employees, logo_url)
               VALUES ($1, $2, $3, $4, $5)
               RETURNING {COMPANY_COLUMNS}""",
            [data.handle, data.name, data.description, data.num_employees, data.logo_url]
        )
    except IntegrityError as exc:
        await db.rollback()
        if constraint_violation(exc) == UNIQUE_VIOLATION:
            logger.warning(f"Rejected duplicate company name: {data.name}")
            raise ConflictError(f"Duplicate company name: {data.name}")
        raise

    company = CompanyResponse.model_validate(dict(result.mappings().one()))
    await db.commit()

    logger.info(f"Created company {company.handle}")
    return company


async def find_all_companies(
    db: AsyncSession,
    filters: Optional[Mapping[str, Any]] = None
) -> list[CompanyResponse]:
    """
    List companies, optionally filtered by nameLike/minEmployees/maxEmployees.

    Raises:
        BadRequestError: From the filter builder.
    """
    where = sql_for_filter(filters, FilterTable.COMPANIES)
    result = await run_sql(
        db,
        f"""SELECT {COMPANY_COLUMNS}
           FROM companies
           {where.where_clause}
           ORDER BY name""",
        where.values
    )
    return [CompanyResponse.model_validate(dict(row)) for row in result.mappings()]


async def get_company(db: AsyncSession, handle: str) -> CompanyDetail:
    """
    Get a company with all of its jobs.

    Raises:
        NotFoundError: If no company has this handle.
    """
    result = await run_sql(
        db,
        f"""SELECT {COMPANY_COLUMNS}
           FROM companies
           WHERE handle = $1""",
        [handle]
    )
    row = result.mappings().first()
    if not row:
        raise NotFoundError(f"No company: {handle}")

    jobs_result = await run_sql(
        db,
        """SELECT id, title, salary, equity
           FROM jobs
           WHERE company_handle = $1
           ORDER BY id""",
        [handle]
    )
    jobs = [
        JobSummary.model_validate(normalize_equity(dict(job)))
        for job in jobs_result.mappings()
    ]
    return CompanyDetail.model_validate({**dict(row), "jobs": jobs})


async def update_company(db: AsyncSession, handle: str, data: Mapping[str, Any]) -> CompanyResponse:
    """
    Partially update a company. `data` is keyed by request field names.

    Raises:
        BadRequestError: If `data` is empty.
        NotFoundError: If no company has this handle.
        ConflictError: If the new name belongs to another company.
    """
    set_clause = sql_for_partial_update(data, COMPANY_JS_TO_SQL)
    handle_idx = len(set_clause.values) + 1

    try:
        result = await run_sql(
            db,
            f"""UPDATE companies
               SET {set_clause.set_cols}
               WHERE handle = ${handle_idx}
               RETURNING {COMPANY_COLUMNS}""",
            [*set_clause.values, handle]
        )
    except IntegrityError as exc:
        await db.rollback()
        if constraint_violation(exc) == UNIQUE_VIOLATION:
            logger.warning(f"Rejected duplicate company name: {data.get('name')}")
            raise ConflictError(f"Duplicate company name: {data.get('name')}")
        raise

    row = result.mappings().first()
    if not row:
        await db.rollback()
        raise NotFoundError(f"No company: {handle}")

    company = CompanyResponse.model_validate(dict(row))
    await db.commit()

    logger.info(f"Updated company {handle}: {', '.join(data)}")
    return company


async def remove_company(db: AsyncSession, handle: str) -> None:
    """
    Delete a company. Its jobs and their applications go with it.

    Raises:
        NotFoundError: If no company has this handle.
    """
    result = await run_sql(
        db,
        """DELETE
           FROM companies
           WHERE handle = $1
           RETURNING handle""",
        [handle]
    )
    row = result.first()
    if not row:
        await db.rollback()
        raise NotFoundError(f"No company: {handle}")

    await db.commit()
    logger.info(f"Deleted company {handle}")
