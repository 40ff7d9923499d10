"""
Users API endpoints.

Admins manage every account. A logged-in user may read, update and delete
their own account and apply for jobs as themselves, but never make
themselves an admin.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobly.api.auth import Principal, require_admin, require_admin_or_self
from jobly.database import get_db
from jobly.errors import (
    FOREIGN_KEY_VIOLATION,
    UNIQUE_VIOLATION,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    constraint_violation,
)
from jobly.schemas.common import DeletedResponse
from jobly.schemas.user import (
    ApplicationResponse,
    UserCreate,
    UserEnvelope,
    UserListResponse,
    UserTokenEnvelope,
    UserUpdate,
)
from jobly.services import users as user_service
from jobly.utils.jwt_handler import create_token

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=UserTokenEnvelope, status_code=201)
async def create_user(
    data: UserCreate,
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Add a user, possibly an admin. Not a registration endpoint.

    Returns:
        201: {"user": {...}, "token": ...}
        401: Not an admin
        409: Username already taken
    """
    user = await user_service.register(db, data)
    logger.info(f"Admin {admin.username} created user {user.username}")
    return {"user": user, "token": create_token(user.username, user.is_admin)}


@router.get("", response_model=UserListResponse)
async def list_users(
    admin: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """List all users. Admin only."""
    users = await user_service.find_all_users(db)
    return {"users": users}


@router.get("/{username}", response_model=UserEnvelope)
async def get_user(
    username: str,
    principal: Principal = Depends(require_admin_or_self),
    db: AsyncSession = Depends(get_db)
):
    """Get a user with the ids of the jobs they applied to."""
    user = await user_service.get_user(db, username)
    return {"user": user}


@router.patch("/{username}", response_model=UserEnvelope)
async def update_user(
    username: str,
    data: UserUpdate,
    principal: Principal = Depends(require_admin_or_self),
    db: AsyncSession = Depends(get_db)
):
    """
    Update some of password, firstName, lastName, email, isAdmin.

    Returns:
        200: {"user": {...}}
        400: Empty or invalid body
        401: Not the admin or the user; or a non-admin setting isAdmin
        404: No such user
    """
    changes = data.model_dump(by_alias=True, exclude_unset=True)
    if "isAdmin" in changes and not principal.is_admin:
        logger.warning(f"User {principal.username} attempted to change isAdmin on {username}")
        raise UnauthorizedError()

    user = await user_service.update_user(db, username, changes)
    return {"user": user}


@router.delete("/{username}", response_model=DeletedResponse)
async def delete_user(
    username: str,
    principal: Principal = Depends(require_admin_or_self),
    db: AsyncSession = Depends(get_db)
):
    """Delete a user and their applications."""
    await user_service.remove_user(db, username)
    return {"deleted": username}


@router.post("/{username}/jobs/{job_id}", response_model=ApplicationResponse, status_code=201)
async def apply_for_job(
    username: str,
    job_id: int,
    principal: Principal = Depends(require_admin_or_self),
    db: AsyncSession = Depends(get_db)
):
    """
    Apply for a job.

    Returns:
        201: {"applied": job_id}
        401: Not the admin or the user
        404: The user or the job does not exist
        409: Already applied
    """
    try:
        applied = await user_service.apply_for_job(db, username, job_id)
    except IntegrityError as exc:
        violation = constraint_violation(exc)
        logger.warning(f"Application {username} -> {job_id} rejected: {violation}")
        if violation == FOREIGN_KEY_VIOLATION:
            raise NotFoundError(f"No user or job: {username}, {job_id}")
        if violation == UNIQUE_VIOLATION:
            raise ConflictError(
                f"Duplicate application: {username} has already applied for job {job_id}"
            )
        raise
    return {"applied": applied}
