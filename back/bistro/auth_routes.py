import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel import Session

from . import security
from .db import get_session
from .models import Staff
from .schemas import LoginRequest, LoginResponse, StaffRead, StaffSummary
from .settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    session: Session = Depends(get_session),
):
    staff = security.authenticate_staff(session, credentials.username, credentials.password)
    access_token = security.create_access_token(
        data={"sub": staff.id, "role": staff.role.value}
    )

    body = LoginResponse(
        staff=StaffSummary(id=staff.id, name=staff.name, role=staff.role, username=staff.username)
    )
    response = JSONResponse(content=body.model_dump(mode="json", by_alias=True))
    response.set_cookie(
        key=security.ACCESS_TOKEN_COOKIE,
        value=access_token,
        httponly=True,
        secure=settings.is_production,  # Only enforce HTTPS in production
        samesite="lax",
        path="/",
        max_age=settings.access_token_expire_minutes * 60,
    )
    logger.info(f"Staff {staff.username} logged in")
    return response


@router.post("/logout")
def logout():
    response = JSONResponse(content={"success": True})
    response.delete_cookie(key=security.ACCESS_TOKEN_COOKIE, path="/")  # Must match path used in set_cookie
    return response


@router.get("/me", response_model=StaffRead)
def read_me(
    current_staff: Annotated[Staff, Depends(security.get_current_staff)],
):
    return StaffRead.from_model(current_staff)
