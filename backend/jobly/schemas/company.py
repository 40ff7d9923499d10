"""Company-related Pydantic schemas."""
from typing import Optional
from pydantic import Field

from jobly.schemas.common import CamelModel, RequestModel, OptionalUrl
from jobly.schemas.job import JobSummary


class CompanyCreate(RequestModel):
    """Schema for creating a new company."""
    handle: str = Field(min_length=1, max_length=25)
    name: str = Field(min_length=1)
    description: str
    num_employees: Optional[int] = Field(None, ge=0)
    logo_url: OptionalUrl = None


class CompanyUpdate(RequestModel):
    """Partial update. The handle cannot change; name and description cannot be null."""
    name: str = Field(None, min_length=1)
    description: str = None
    num_employees: Optional[int] = Field(None, ge=0)
    logo_url: OptionalUrl = None


class CompanyFilter(RequestModel):
    """Query-string filters for the company listing."""
    name_like: Optional[str] = None
    min_employees: Optional[int] = Field(None, ge=0)
    max_employees: Optional[int] = Field(None, ge=0)


class CompanyResponse(CamelModel):
    """Schema for company response."""
    handle: str
    name: str
    description: str
    num_employees: Optional[int] = None
    logo_url: Optional[str] = None


class CompanyDetail(CompanyResponse):
    """A company with its jobs."""
    jobs: list[JobSummary] = []


class CompanyEnvelope(CamelModel):
    company: CompanyResponse


class CompanyDetailEnvelope(CamelModel):
    company: CompanyDetail


class CompanyListResponse(CamelModel):
    companies: list[CompanyResponse]
