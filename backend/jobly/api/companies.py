"""
Companies API endpoints.

Reads are public; creating, updating and deleting require an admin token.
"""
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from jobly.api.auth import Principal, require_admin
from jobly.database import get_db
from jobly.schemas.common import DeletedResponse, validate_filters
from jobly.schemas.company import (
    CompanyCreate,
    CompanyDetailEnvelope,
    CompanyEnvelope,
    CompanyFilter,
    CompanyListResponse,
    CompanyUpdate,
)
from jobly.schemas.job import CompanyJobsEnvelope, JobFilter
from jobly.services import companies as company_service
from jobly.services import jobs as job_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=CompanyEnvelope, status_code=201)
async def create_company(
    company: CompanyCreate,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a company.

    Returns:
        201: {"company": {handle, name, description, numEmployees, logoUrl}}
        400: Invalid body
        401: Not an admin
        409: Handle already taken
    """
    created = await company_service.create_company(db, company)
    return {"company": created}


@router.get("", response_model=CompanyListResponse)
async def list_companies(
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    List companies ordered by name.

    Query filters (all optional): nameLike, minEmployees, maxEmployees.
    """
    filters = validate_filters(request.query_params, CompanyFilter)
    companies = await company_service.find_all_companies(db, filters)
    return {"companies": companies}


@router.get("/{handle}", response_model=CompanyDetailEnvelope)
async def get_company(
    handle: str,
    db: AsyncSession = Depends(get_db)
):
    """Get a company and all of its jobs."""
    company = await company_service.get_company(db, handle)
    return {"company": company}


@router.get("/{handle}/jobs", response_model=CompanyJobsEnvelope)
async def get_company_jobs(
    handle: str,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Get a company with its jobs, filtered like GET /jobs.

    A company with no matching jobs is returned with an empty list.

    Returns:
        200: {"company": {companyHandle, name, numEmployees, jobs: [...]}}
        400: Bad filter
        404: No such company
    """
    filters = validate_filters(request.query_params, JobFilter)
    company = await job_service.find_company_jobs(db, handle, filters)
    return {"company": company}


@router.patch("/{handle}", response_model=CompanyEnvelope)
async def update_company(
    handle: str,
    data: CompanyUpdate,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Update some of name, description, numEmployees, logoUrl.

    Returns:
        200: {"company": {...}}
        400: Empty or invalid body
        401: Not an admin
        404: No such company
    """
    changes = data.model_dump(by_alias=True, exclude_unset=True)
    company = await company_service.update_company(db, handle, changes)
    return {"company": company}


@router.delete("/{handle}", response_model=DeletedResponse)
async def delete_company(
    handle: str,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a company along with its jobs."""
    await company_service.remove_company(db, handle)
    return {"deleted": handle}
