import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated

import bcrypt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlmodel import Session

from .db import get_session
from .errors import UnauthorizedError
from .models import Staff
from .permissions import Permissions, PermissionService
from .repositories import SqlStaffRepository
from .settings import settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8")
        )
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def authenticate_staff(session: Session, username: str, password: str) -> Staff:
    """
    Check a username/password pair.

    Raises UnauthorizedError for unknown users, wrong passwords and inactive
    accounts alike (inactive accounts are refused even with the right password).
    """
    staff = SqlStaffRepository(session).get_by_username(username)
    if not staff or not verify_password(password, staff.hashed_password):
        logger.warning(f"Failed login for username {username!r}")
        raise UnauthorizedError("Invalid credentials")
    if not staff.is_active:
        logger.warning(f"Login refused for inactive account {username!r}")
        raise UnauthorizedError("Account is inactive")
    return staff


async def get_token_from_cookie(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)]
) -> str:
    """
    Get token from cookie (primary) or Authorization header (fallback).
    """
    cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if cookie_token:
        return cookie_token

    if token:
        return token

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )


def get_current_staff(
    token: Annotated[str, Depends(get_token_from_cookie)],
    session: Annotated[Session, Depends(get_session)],
) -> Staff:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        staff_id: str | None = payload.get("sub")
        if staff_id is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    staff = SqlStaffRepository(session).get(staff_id)
    if staff is None:
        raise credentials_exception

    # Deactivation takes effect immediately, not at token expiry
    if not staff.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is inactive",
        )

    return staff


class PermissionChecker:
    """Dependency that only lets staff whose role grants the permission through."""

    def __init__(self, required_permission: Permissions):
        self.required_permission = required_permission

    def __call__(
        self,
        current_staff: Annotated[Staff, Depends(get_current_staff)],
    ) -> Staff:
        if not PermissionService.has_permission(current_staff, self.required_permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized",
            )
        return current_staff
