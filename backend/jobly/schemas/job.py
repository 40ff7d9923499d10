"""Job-related Pydantic schemas."""
from decimal import Decimal
from typing import Optional
from pydantic import Field

from jobly.schemas.common import CamelModel, RequestModel


class JobBase(RequestModel):
    """Fields an admin may set on a job."""
    title: str = Field(min_length=1)
    salary: Optional[int] = Field(None, ge=0)
    equity: Optional[Decimal] = Field(None, ge=0, le=1)


class JobCreate(JobBase):
    """Schema for creating a new job."""
    company_handle: str = Field(min_length=1, max_length=25)


class JobUpdate(RequestModel):
    """Partial update. id and companyHandle are not accepted; title cannot be null."""
    title: str = Field(None, min_length=1)
    salary: Optional[int] = Field(None, ge=0)
    equity: Optional[Decimal] = Field(None, ge=0, le=1)


class JobFilter(RequestModel):
    """Query-string filters for the job listings."""
    title: Optional[str] = None
    min_salary: Optional[int] = Field(None, ge=0)
    has_equity: Optional[bool] = None


class JobSummary(CamelModel):
    """A job nested under its company."""
    id: int
    title: str
    salary: Optional[int] = None
    equity: Optional[float] = None


class JobResponse(JobSummary):
    """Schema for job response."""
    company_handle: str


class CompanySummary(CamelModel):
    """The owning company shown with a single job."""
    handle: str
    name: str
    num_employees: Optional[int] = None


class JobDetail(JobSummary):
    """A job with its owning company."""
    company: CompanySummary


class CompanyJobs(CamelModel):
    """One company and its (possibly filtered) jobs."""
    company_handle: str
    name: str
    num_employees: Optional[int] = None
    jobs: list[JobSummary] = []


class JobEnvelope(CamelModel):
    job: JobResponse


class JobDetailEnvelope(CamelModel):
    job: JobDetail


class JobListResponse(CamelModel):
    """Jobs grouped by company."""
    jobs: list[CompanyJobs]


class CompanyJobsEnvelope(CamelModel):
    company: CompanyJobs
