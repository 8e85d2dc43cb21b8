import logging
from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from .db import get_session
from .errors import ConflictError
from .repositories import (
    CatalogRepository,
    OrderNumberAllocator,
    OrderRepository,
    SqlCatalogRepository,
    SqlOrderNumberAllocator,
    SqlOrderRepository,
    SqlStaffRepository,
    SqlTableRepository,
    StaffRepository,
    TableRepository,
)
from .settings import settings

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    One transaction spanning every repository.

    Use as a context manager around a write: leaving the block normally
    commits, an exception rolls everything back.

        with uow:
            uow.orders.save(order)
            uow.tables.save(table)
    """

    catalog: CatalogRepository
    tables: TableRepository
    staff: StaffRepository
    orders: OrderRepository
    order_numbers: OrderNumberAllocator

    def __init__(self, session: Session, order_number_start: int | None = None):
        self.session = session
        self.catalog = SqlCatalogRepository(session)
        self.tables = SqlTableRepository(session)
        self.staff = SqlStaffRepository(session)
        self.orders = SqlOrderRepository(session)
        self.order_numbers = SqlOrderNumberAllocator(
            session,
            start=order_number_start if order_number_start is not None else settings.order_number_start,
        )

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            logger.info(f"Rolling back unit of work after {exc_type.__name__}: {exc}")
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


def check_revision(entity, expected_revision: int | None, label: str) -> None:
    """Raise ConflictError when the caller edited a stale copy."""
    if expected_revision is not None and entity.revision != expected_revision:
        raise ConflictError(
            f"{label} was modified concurrently "
            f"(expected revision {expected_revision}, current {entity.revision})"
        )


def get_uow(session: Annotated[Session, Depends(get_session)]) -> UnitOfWork:
    """Per-request unit of work sharing the request's database session."""
    return UnitOfWork(session)
