"""
Jobs API endpoints.
Handles job CRUD operations and the grouped job listing.
"""
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobly.api.auth import Principal, require_admin
from jobly.database import get_db
from jobly.errors import FOREIGN_KEY_VIOLATION, NotFoundError, constraint_violation
from jobly.schemas.common import DeletedResponse, validate_filters
from jobly.schemas.job import (
    JobCreate,
    JobDetailEnvelope,
    JobEnvelope,
    JobFilter,
    JobListResponse,
    JobUpdate,
)
from jobly.services import jobs as job_service

# Configure logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=JobEnvelope, status_code=201)
async def create_job(
    job: JobCreate,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a job for an existing company.

    Returns:
        201: {"job": {id, title, salary, equity, companyHandle}}
        400: Invalid body
        401: Not an admin
        404: companyHandle does not name a company
    """
    try:
        created = await job_service.create_job(db, job)
    except IntegrityError as exc:
        if constraint_violation(exc) == FOREIGN_KEY_VIOLATION:
            logger.warning(f"Job rejected, unknown company: {job.company_handle}")
            raise NotFoundError(
                f"Job NOT created: companyHandle '{job.company_handle}' does not exist"
            )
        raise
    return {"job": created}


@router.get("", response_model=JobListResponse)
async def list_jobs(
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    List jobs grouped by company.

    Query filters (all optional): title, minSalary, hasEquity.

    Returns:
        200: {"jobs": [{companyHandle, name, numEmployees, jobs: [...]}]}
        400: Bad filter
        404: A filter was given and no job matched it
    """
    filters = validate_filters(request.query_params, JobFilter)
    jobs = await job_service.find_all_jobs(db, filters)
    return {"jobs": jobs}


@router.get("/{job_id}", response_model=JobDetailEnvelope)
async def get_job(
    job_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get a single job with its company's handle, name and size."""
    job = await job_service.get_job(db, job_id)
    return {"job": job}


@router.patch("/{job_id}", response_model=JobEnvelope)
async def update_job(
    job_id: int,
    data: JobUpdate,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Update some of title, salary, equity.

    id and companyHandle are rejected with 400.
    """
    changes = data.model_dump(by_alias=True, exclude_unset=True)
    job = await job_service.update_job(db, job_id, changes)
    return {"job": job}


@router.delete("/{job_id}", response_model=DeletedResponse)
async def delete_job(
    job_id: int,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a job."""
    await job_service.remove_job(db, job_id)
    return {"deleted": job_id}
