"""User and job application data access."""
import logging
from typing import Any, Iterable, Mapping, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobly.database import run_sql
from jobly.errors import UNIQUE_VIOLATION, ConflictError, NotFoundError, UnauthorizedError, constraint_violation
from jobly.schemas.user import UserCreate, UserRegister, UserResponse
from jobly.services.sql import sql_for_partial_update
from jobly.utils.password_hash import hash_password, verify_password

logger = logging.getLogger(__name__)

USER_COLUMNS = 'username, first_name AS "firstName", last_name AS "lastName", email, is_admin AS "isAdmin"'

# Request field -> column, where they differ
USER_JS_TO_SQL = {
    "firstName": "first_name",
    "lastName": "last_name",
    "isAdmin": "is_admin",
}

USERS_WITH_APPLICATIONS_SQL = """SELECT u.username,
                  u.first_name AS "firstName",
                  u.last_name AS "lastName",
                  u.email,
                  u.is_admin AS "isAdmin",
                  a.job_id
           FROM users AS u
           LEFT JOIN applications AS a ON u.username = a.username"""


def _group_applications(rows: Iterable[Mapping[str, Any]]) -> list[UserResponse]:
    """Fold user+application rows into one user each with a list of job ids."""
    grouped: dict[str, dict] = {}
    for row in rows:
        user = grouped.get(row["username"])
        if user is None:
            user = grouped[row["username"]] = {
                key: value for key, value in row.items() if key != "job_id"
            }
            user["jobs"] = []
        if row["job_id"] is not None:
            user["jobs"].append(row["job_id"])

    return [UserResponse.model_validate(user) for user in grouped.values()]


async def authenticate(db: AsyncSession, username: str, password: str) -> UserResponse:
    """
    Check a username/password pair.

    Raises:
        UnauthorizedError: If the user does not exist or the password is wrong.
    """
    result = await run_sql(
        db,
        f"""SELECT password, {USER_COLUMNS}
           FROM users
           WHERE username = $1""",
        [username]
    )
    row = result.mappings().first()

    if row and verify_password(password, row["password"]):
        user = {key: value for key, value in row.items() if key != "password"}
        return UserResponse.model_validate(user)

    logger.warning(f"Failed login attempt for username: {username}")
    raise UnauthorizedError("Invalid username/password")


async def register(db: AsyncSession, data: Union[UserRegister, UserCreate]) -> UserResponse:
    """
    Create a user with a hashed password.

    Self-registration (UserRegister) never creates an admin.

    Raises:
        ConflictError: If the username is taken.
    """
    duplicate = await run_sql(
        db,
        "SELECT username FROM users WHERE username = $1",
        [data.username]
    )
    if duplicate.first():
        raise ConflictError(f"Duplicate username: {data.username}")

    is_admin = getattr(data, "is_admin", False)
    try:
        result = await run_sql(
            db,
            f"""INSERT INTO users
                   (username, password, first_name, last_name, email, is_admin)
               VALUES ($1, $2, $3, $4, $5, $6)
               RETURNING {USER_COLUMNS}""",
            [
                data.username,
                hash_password(data.password),
                data.first_name,
                data.last_name,
                data.email,
                is_admin,
            ]
        )
    except IntegrityError as exc:
        await db.rollback()
        if constraint_violation(exc) == UNIQUE_VIOLATION:
            logger.warning(f"Rejected duplicate username: {data.username}")
            raise ConflictError(f"Duplicate username: {data.username}")
        raise

    user = UserResponse.model_validate(dict(result.mappings().one()))
    await db.commit()

    logger.info(f"Registered user {user.username} (admin={user.is_admin})")
    return user


async def find_all_users(db: AsyncSession) -> list[UserResponse]:
    """List users, each with the ids of the jobs they applied to."""
    result = await run_sql(
        db,
        f"""{USERS_WITH_APPLICATIONS_SQL}
           ORDER BY u.username, a.job_id"""
    )
    return _group_applications(result.mappings())


async def get_user(db: AsyncSession, username: str) -> UserResponse:
    """
    Get a user with the ids of the jobs they applied to.

    Raises:
        NotFoundError: If the user does not exist.
    """
    result = await run_sql(
        db,
        f"""{USERS_WITH_APPLICATIONS_SQL}
           WHERE u.username = $1
           ORDER BY a.job_id""",
        [username]
    )
    users = _group_applications(result.mappings())
    if not users:
        raise NotFoundError(f"No user: {username}")
    return users[0]


async def update_user(db: AsyncSession, username: str, data: Mapping[str, Any]) -> UserResponse:
    """
    Partially update a user. A new password is hashed before storing.

    Callers must make sure only an admin can set isAdmin.

    Raises:
        BadRequestError: If `data` is empty.
        NotFoundError: If the user does not exist.
    """
    data = dict(data)
    if data.get("password"):
        data["password"] = hash_password(data["password"])

    set_clause = sql_for_partial_update(data, USER_JS_TO_SQL)
    username_idx = len(set_clause.values) + 1

    result = await run_sql(
        db,
        f"""UPDATE users
           SET {set_clause.set_cols}
           WHERE username = ${username_idx}
           RETURNING username""",
        [*set_clause.values, username]
    )
    if not result.first():
        await db.rollback()
        raise NotFoundError(f"No user: {username}")

    await db.commit()
    logger.info(f"Updated user {username}: {', '.join(key for key in data if key != 'password')}")

    return await get_user(db, username)


async def remove_user(db: AsyncSession, username: str) -> None:
    """
    Delete a user and their applications.

    Raises:
        NotFoundError: If the user does not exist.
    """
    result = await run_sql(
        db,
        """DELETE
           FROM users
           WHERE username = $1
           RETURNING username""",
        [username]
    )
    if not result.first():
        await db.rollback()
        raise NotFoundError(f"No user: {username}")

    await db.commit()
    logger.info(f"Deleted user {username}")


async def apply_for_job(db: AsyncSession, username: str, job_id: int) -> int:
    """
    Record that a user applied for a job. Returns the job id.

    Raises:
        ConflictError: If the user already applied for this job.
        IntegrityError: If the user or the job does not exist. The session
            is rolled back before re-raising.
    """
    duplicate = await run_sql(
        db,
        """SELECT username, job_id
           FROM applications
           WHERE username = $1 AND job_id = $2""",
        [username, job_id]
    )
    if duplicate.first():
        raise ConflictError(f"Duplicate application: {username} has already applied for job {job_id}")

    try:
        result = await run_sql(
            db,
            """INSERT INTO applications
                   (username, job_id)
               VALUES ($1, $2)
               RETURNING job_id""",
            [username, job_id]
        )
        applied = result.scalar_one()
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise

    logger.info(f"User {username} applied for job {applied}")
    return applied
