"""Authentication-related Pydantic schemas."""
from pydantic import BaseModel, ConfigDict


class LoginRequest(BaseModel):
    """Request to exchange username/password for a token."""
    model_config = ConfigDict(extra="forbid")

    username: str
    password: str


class TokenResponse(BaseModel):
    """Response after successful authentication."""
    token: str
