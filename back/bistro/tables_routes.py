from typing import Annotated

from fastapi import APIRouter, Depends

from .models import Staff
from .permissions import Permissions
from .schemas import TableCreate, TableRead, TableUpdate
from .security import PermissionChecker
from .stores import TableService
from .unit_of_work import UnitOfWork, get_uow

router = APIRouter(prefix="/tables", tags=["Tables"])


@router.get("", response_model=list[TableRead])
def list_tables(
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.TABLES_READ))],
    uow: UnitOfWork = Depends(get_uow),
):
    return [TableRead.from_model(table) for table in TableService(uow).list_tables()]


@router.get("/{table_id}", response_model=TableRead)
def get_table(
    table_id: str,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.TABLES_READ))],
    uow: UnitOfWork = Depends(get_uow),
):
    return TableRead.from_model(TableService(uow).get_table(table_id))


@router.post("", response_model=TableRead)
def create_table(
    table_data: TableCreate,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.TABLES_MANAGE))],
    uow: UnitOfWork = Depends(get_uow),
):
    return TableRead.from_model(TableService(uow).create_table(table_data))


@router.patch("/{table_id}", response_model=TableRead)
def update_table(
    table_id: str,
    table_update: TableUpdate,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.TABLES_MANAGE))],
    uow: UnitOfWork = Depends(get_uow),
):
    """Manual status override (e.g. cleaning -> available) or layout change."""
    return TableRead.from_model(TableService(uow).update_table(table_id, table_update))
