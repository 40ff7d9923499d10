"""
Authentication endpoints and access-control dependencies.

Tokens are JWTs carrying {username, isAdmin}. A request with a missing or
invalid token is treated as anonymous; the route decides whether that is
allowed:

- require_admin: admins only
- require_admin_or_self: admins, or the user named in the path
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from jobly.database import get_db
from jobly.errors import UnauthorizedError
from jobly.schemas.auth import LoginRequest, TokenResponse
from jobly.schemas.user import UserRegister
from jobly.services import users as user_service
from jobly.utils.jwt_handler import create_token, decode_token

logger = logging.getLogger(__name__)
router = APIRouter()

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The caller identified by a valid token."""
    username: str
    is_admin: bool = False


# Authentication Dependencies
async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[Principal]:
    """
    Read the bearer token, if any.

    Returns:
        Principal for a valid token, None otherwise. Never raises.
    """
    if credentials is None:
        return None

    try:
        payload = decode_token(credentials.credentials)
    except UnauthorizedError as exc:
        logger.info(f"Ignoring bearer token: {exc.message}")
        return None

    username = payload.get("username")
    if not username:
        return None
    return Principal(username=username, is_admin=bool(payload.get("isAdmin", False)))


async def require_admin(
    principal: Optional[Principal] = Depends(get_current_principal)
) -> Principal:
    """
    Dependency to require an admin token.

    Raises:
        UnauthorizedError: If the request is anonymous or not from an admin.
    """
    if principal is None or not principal.is_admin:
        if principal is not None:
            logger.warning(f"User {principal.username} attempted to access admin endpoint")
        raise UnauthorizedError()
    return principal


async def require_admin_or_self(
    username: str,
    principal: Optional[Principal] = Depends(get_current_principal)
) -> Principal:
    """
    Dependency for routes under /users/{username}.

    Raises:
        UnauthorizedError: Unless the caller is an admin or is `username`.
    """
    if principal is None:
        raise UnauthorizedError()
    if not principal.is_admin and principal.username != username:
        logger.warning(f"User {principal.username} attempted to access user {username}")
        raise UnauthorizedError()
    return principal


# Endpoints
@router.post("/token", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Exchange a username/password for a token.

    Returns:
        200: {"token": ...}
        400: Body is missing a field or has extra ones
        401: Unknown username or wrong password
    """
    user = await user_service.authenticate(db, credentials.username, credentials.password)
    logger.info(f"Successful login: {user.username}")
    return TokenResponse(token=create_token(user.username, user.is_admin))


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a (non-admin) account and log it in.

    Returns:
        201: {"token": ...}
        400: Invalid body
        409: Username already taken
    """
    user = await user_service.register(db, data)
    return TokenResponse(token=create_token(user.username, user.is_admin))
