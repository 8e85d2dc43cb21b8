from typing import Annotated

from fastapi import APIRouter, Depends

from .models import Staff
from .permissions import Permissions
from .schemas import StaffCreate, StaffRead, StaffUpdate
from .security import PermissionChecker
from .stores import StaffService
from .unit_of_work import UnitOfWork, get_uow

router = APIRouter(prefix="/staff", tags=["Staff"])


@router.get("", response_model=list[StaffRead])
def list_staff(
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.STAFF_READ))],
    uow: UnitOfWork = Depends(get_uow),
):
    """List all staff accounts, active or not."""
    return [StaffRead.from_model(staff) for staff in StaffService(uow).list_staff()]


@router.post("", response_model=StaffRead)
def create_staff(
    staff_data: StaffCreate,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.STAFF_MANAGE))],
    uow: UnitOfWork = Depends(get_uow),
):
    return StaffRead.from_model(StaffService(uow).create_staff(staff_data))


@router.patch("/{staff_id}", response_model=StaffRead)
def update_staff(
    staff_id: str,
    staff_update: StaffUpdate,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.STAFF_MANAGE))],
    uow: UnitOfWork = Depends(get_uow),
):
    """Update a staff account (role, active flag, name or password)."""
    return StaffRead.from_model(StaffService(uow).update_staff(staff_id, staff_update))
