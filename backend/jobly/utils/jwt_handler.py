# jwt_handler.py
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
from jobly.config import settings
from jobly.errors import UnauthorizedError


def create_token(username: str, is_admin: bool, expires_delta: timedelta | None = None) -> str:
    """Sign a token carrying {username, isAdmin}."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {
        "username": username,
        "isAdmin": bool(is_admin),
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise UnauthorizedError("Token expired") from exc
    except JWTError as exc:
        raise UnauthorizedError("Invalid token") from exc
