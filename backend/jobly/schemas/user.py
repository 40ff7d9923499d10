"""User-related Pydantic schemas."""
from pydantic import EmailStr, Field

from jobly.schemas.common import CamelModel, RequestModel


class UserRegister(RequestModel):
    """Self-registration. Never grants admin."""
    username: str = Field(min_length=1, max_length=25)
    password: str = Field(min_length=5, max_length=20)
    first_name: str = Field(min_length=1, max_length=30)
    last_name: str = Field(min_length=1, max_length=30)
    email: EmailStr


class UserCreate(UserRegister):
    """Admin-created user, may be an admin."""
    is_admin: bool = False


class UserUpdate(RequestModel):
    """Partial update. The username cannot change and no field may be null."""
    password: str = Field(None, min_length=5, max_length=20)
    first_name: str = Field(None, min_length=1, max_length=30)
    last_name: str = Field(None, min_length=1, max_length=30)
    email: EmailStr = None
    is_admin: bool = None


class UserResponse(CamelModel):
    """Schema for user response. Password is never included."""
    username: str
    first_name: str
    last_name: str
    email: str
    is_admin: bool = False
    jobs: list[int] = []  # ids of jobs applied to


class UserEnvelope(CamelModel):
    user: UserResponse


class UserTokenEnvelope(CamelModel):
    user: UserResponse
    token: str


class UserListResponse(CamelModel):
    users: list[UserResponse]


class ApplicationResponse(CamelModel):
    """Response after applying for a job."""
    applied: int
