"""
Job data access.

Two listings exist and they answer "nothing found" differently:

- find_all_jobs: every company with at least one matching job (inner join).
  Nothing matching a filter raises NoMatchingJobsError.
- find_company_jobs: one company and its matching jobs (left join). A known
  company with no matching jobs comes back with an empty job list; an
  unknown handle raises NotFoundError.
"""
import logging
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobly.database import run_sql
from jobly.errors import NoMatchingJobsError, NotFoundError
from jobly.schemas.job import CompanyJobs, JobCreate, JobDetail, JobResponse, JobSummary
from jobly.services.sql import FilterTable, sql_for_filter, sql_for_partial_update

logger = logging.getLogger(__name__)

JOB_COLUMNS = 'id, title, salary, equity, company_handle AS "companyHandle"'


def normalize_equity(row: dict) -> dict:
    """
    Convert a stored equity value to a float in place.

    PostgreSQL NUMERIC comes back as Decimal, which would otherwise be
    serialized as a string. None stays None.
    """
    equity = row.get("equity")
    if equity is not None:
        row["equity"] = float(equity)
    return row


def _group_by_company(rows: Iterable[Mapping[str, Any]]) -> list[CompanyJobs]:
    """Fold flat company+job rows into one CompanyJobs per company, keeping row order."""
    grouped: dict[str, dict] = {}
    for row in rows:
        handle = row["companyHandle"]
        company = grouped.get(handle)
        if company is None:
            company = grouped[handle] = {
                "companyHandle": handle,
                "name": row["name"],
                "numEmployees": row["numEmployees"],
                "jobs": [],
            }

        # Left join rows for a company without (matching) jobs carry no job
        if row["id"] is None:
            continue

        job = {
            "id": row["id"],
            "title": row["title"],
            "salary": row["salary"],
            "equity": row["equity"],
        }
        company["jobs"].append(JobSummary.model_validate(normalize_equity(job)))

    return [CompanyJobs.model_validate(company) for company in grouped.values()]


async def create_job(db: AsyncSession, data: JobCreate) -> JobResponse:
    """
    Create a job.

    No duplicate check: a company can post the same title twice.

    Raises:
        IntegrityError: If company_handle does not reference a company.
            The session is rolled back before re-raising; callers decide
            what the failure means.
    """
    try:
        result = await run_sql(
            db,
            f"""INSERT INTO jobs
                   (title, salary, equity, company_handle)
               VALUES ($1, $2, $3, $4)
               RETURNING {JOB_COLUMNS}""",
            [data.title, data.salary, data.equity, data.company_handle]
        )
        row = result.mappings().one()
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise

    job = JobResponse.model_validate(normalize_equity(dict(row)))
    logger.info(f"Created job {job.id}: {job.title} at {job.company_handle}")
    return job


async def find_all_jobs(
    db: AsyncSession,
    filters: Optional[Mapping[str, Any]] = None
) -> list[CompanyJobs]:
    """
    List jobs grouped by company, optionally filtered by title/minSalary/hasEquity.

    Companies without a matching job are left out.

    Raises:
        BadRequestError: From the filter builder.
        NoMatchingJobsError: If a filter was given and nothing matched.
    """
    where = sql_for_filter(filters, FilterTable.JOBS)
    result = await run_sql(
        db,
        f"""SELECT c.handle AS "companyHandle",
                  c.name,
                  c.num_employees AS "numEmployees",
                  j.id,
                  j.title,
                  j.salary,
                  j.equity
           FROM jobs AS j
           JOIN companies AS c ON j.company_handle = c.handle
           {where.where_clause}
           ORDER BY c.handle, j.id""",
        where.values
    )
    companies = _group_by_company(result.mappings())

    if not companies and where.where_clause:
        raise NoMatchingJobsError()

    return companies


async def find_company_jobs(
    db: AsyncSession,
    handle: str,
    filters: Optional[Mapping[str, Any]] = None
) -> CompanyJobs:
    """
    Get one company with its jobs, optionally filtered like find_all_jobs.

    The filter is applied in the join so the company row survives even when
    none of its jobs match.

    Raises:
        BadRequestError: From the filter builder.
        NotFoundError: If no company has this handle.
    """
    where = sql_for_filter(filters, FilterTable.JOBS)

    join_on = "j.company_handle = c.handle"
    if where.conditions:
        join_on = f"{join_on} AND {where.conditions}"
    handle_idx = len(where.values) + 1

    result = await run_sql(
        db,
        f"""SELECT c.handle AS "companyHandle",
                  c.name,
                  c.num_employees AS "numEmployees",
                  j.id,
                  j.title,
                  j.salary,
                  j.equity
           FROM companies AS c
           LEFT JOIN jobs AS j ON {join_on}
           WHERE c.handle = ${handle_idx}
           ORDER BY j.id""",
        [*where.values, handle]
    )
    companies = _group_by_company(result.mappings())

    if not companies:
        raise NotFoundError(f"No company: {handle}")

    return companies[0]


async def get_job(db: AsyncSession, job_id: int) -> JobDetail:
    """
    Get a job with a summary of its company.

    Raises:
        NotFoundError: If the job does not exist.
    """
    result = await run_sql(
        db,
        """SELECT j.id,
                  j.title,
                  j.salary,
                  j.equity,
                  c.handle,
                  c.name,
                  c.num_employees AS "numEmployees"
           FROM jobs AS j
           JOIN companies AS c ON j.company_handle = c.handle
           WHERE j.id = $1""",
        [job_id]
    )
    row = result.mappings().first()
    if not row:
        raise NotFoundError(f"No job: {job_id}")

    return JobDetail.model_validate(normalize_equity({
        "id": row["id"],
        "title": row["title"],
        "salary": row["salary"],
        "equity": row["equity"],
        "company": {
            "handle": row["handle"],
            "name": row["name"],
            "numEmployees": row["numEmployees"],
        },
    }))


async def update_job(db: AsyncSession, job_id: int, data: Mapping[str, Any]) -> JobResponse:
    """
    Partially update a job's title, salary and/or equity.

    id and companyHandle are rejected by the request schema before this is
    called.

    Raises:
        BadRequestError: If `data` is empty.
        NotFoundError: If the job does not exist.
    """
    set_clause = sql_for_partial_update(data)
    id_idx = len(set_clause.values) + 1

    result = await run_sql(
        db,
        f"""UPDATE jobs
           SET {set_clause.set_cols}
           WHERE id = ${id_idx}
           RETURNING {JOB_COLUMNS}""",
        [*set_clause.values, job_id]
    )
    row = result.mappings().first()
    if not row:
        await db.rollback()
        raise NotFoundError(f"No job: {job_id}")

    job = JobResponse.model_validate(normalize_equity(dict(row)))
    await db.commit()

    logger.info(f"Updated job {job_id}: {', '.join(data)}")
    return job


async def remove_job(db: AsyncSession, job_id: int) -> None:
    """
    Delete a job and any applications to it.

    Raises:
        NotFoundError: If the job does not exist.
    """
    result = await run_sql(
        db,
        """DELETE
           FROM jobs
           WHERE id = $1
           RETURNING id""",
        [job_id]
    )
    if not result.first():
        await db.rollback()
        raise NotFoundError(f"No job: {job_id}")

    await db.commit()
    logger.info(f"Deleted job {job_id}")
