"""
Repository interfaces the services depend on, and their SQLModel implementations.

Services only see the Protocols; swapping the backing store means providing
another implementation, not touching the order or stats logic.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from sqlalchemy import update
from sqlmodel import Session, func, select

from .models import (
    CLOSED_ORDER_STATUSES,
    MenuCategory,
    MenuItem,
    Order,
    OrderCounter,
    OrderItem,
    PaymentStatus,
    Staff,
    Table,
    TableStatus,
)


ORDER_NUMBER_SEQUENCE = "order_number"


class CatalogRepository(Protocol):
    def list_categories(self) -> Sequence[MenuCategory]: ...
    def get_category(self, category_id: str) -> MenuCategory | None: ...
    def list_items(self, category_id: str | None = None) -> Sequence[MenuItem]: ...
    def get_item(self, item_id: str, for_update: bool = False) -> MenuItem | None: ...
    def get_items(self, item_ids: Sequence[str]) -> dict[str, MenuItem]: ...
    def add_category(self, category: MenuCategory) -> MenuCategory: ...
    def add_item(self, item: MenuItem) -> MenuItem: ...
    def save_item(self, item: MenuItem) -> MenuItem: ...


class TableRepository(Protocol):
    def list(self) -> Sequence[Table]: ...
    def get(self, table_id: str, for_update: bool = False) -> Table | None: ...
    def get_by_number(self, number: int) -> Table | None: ...
    def add(self, table: Table) -> Table: ...
    def save(self, table: Table) -> Table: ...
    def count(self) -> int: ...
    def count_by_status(self, status: TableStatus) -> int: ...


class StaffRepository(Protocol):
    def list(self) -> Sequence[Staff]: ...
    def get(self, staff_id: str, for_update: bool = False) -> Staff | None: ...
    def get_by_username(self, username: str) -> Staff | None: ...
    def add(self, staff: Staff) -> Staff: ...
    def save(self, staff: Staff) -> Staff: ...
    def count_active(self) -> int: ...


class OrderRepository(Protocol):
    def list(self) -> Sequence[Order]: ...
    def list_active(self) -> Sequence[Order]: ...
    def get(self, order_id: str, for_update: bool = False) -> Order | None: ...
    def items_for(self, order_id: str) -> Sequence[OrderItem]: ...
    def get_item(self, item_id: str) -> OrderItem | None: ...
    def add(self, order: Order, items: Sequence[OrderItem]) -> Order: ...
    def save(self, order: Order) -> Order: ...
    def save_item(self, item: OrderItem) -> OrderItem: ...
    def count_active(self) -> int: ...
    def paid_total_between(self, start: datetime, end: datetime) -> int: ...


class OrderNumberAllocator(Protocol):
    def ensure_counter(self) -> None: ...
    def next_number(self) -> int: ...


def _bump(entity) -> None:
    entity.revision = (entity.revision or 0) + 1


class SqlCatalogRepository:
    def __init__(self, session: Session):
        self.session = session

    def list_categories(self) -> Sequence[MenuCategory]:
        return self.session.exec(
            select(MenuCategory).order_by(MenuCategory.order, MenuCategory.name)
        ).all()

    def get_category(self, category_id: str) -> MenuCategory | None:
        return self.session.get(MenuCategory, category_id)

    def list_items(self, category_id: str | None = None) -> Sequence[MenuItem]:
        statement = select(MenuItem)
        if category_id is not None:
            statement = statement.where(MenuItem.category_id == category_id)
        return self.session.exec(statement.order_by(MenuItem.order, MenuItem.name)).all()

    def get_item(self, item_id: str, for_update: bool = False) -> MenuItem | None:
        statement = select(MenuItem).where(MenuItem.id == item_id)
        if for_update:
            statement = statement.with_for_update()
        return self.session.exec(statement).first()

    def get_items(self, item_ids: Sequence[str]) -> dict[str, MenuItem]:
        if not item_ids:
            return {}
        items = self.session.exec(select(MenuItem).where(MenuItem.id.in_(set(item_ids)))).all()
        return {item.id: item for item in items}

    def add_category(self, category: MenuCategory) -> MenuCategory:
        self.session.add(category)
        self.session.flush()
        return category

    def add_item(self, item: MenuItem) -> MenuItem:
        self.session.add(item)
        self.session.flush()
        return item

    def save_item(self, item: MenuItem) -> MenuItem:
        _bump(item)
        self.session.add(item)
        self.session.flush()
        return item


class SqlTableRepository:
    def __init__(self, session: Session):
        self.session = session

    def list(self) -> Sequence[Table]:
        return self.session.exec(select(Table).order_by(Table.number)).all()

    def get(self, table_id: str, for_update: bool = False) -> Table | None:
        statement = select(Table).where(Table.id == table_id)
        if for_update:
            statement = statement.with_for_update()
        return self.session.exec(statement).first()

    def get_by_number(self, number: int) -> Table | None:
        return self.session.exec(select(Table).where(Table.number == number)).first()

    def add(self, table: Table) -> Table:
        self.session.add(table)
        self.session.flush()
        return table

    def save(self, table: Table) -> Table:
        _bump(table)
        self.session.add(table)
        self.session.flush()
        return table

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(Table)).one()

    def count_by_status(self, status: TableStatus) -> int:
        return self.session.exec(
            select(func.count()).select_from(Table).where(Table.status == status)
        ).one()


class SqlStaffRepository:
    def __init__(self, session: Session):
        self.session = session

    def list(self) -> Sequence[Staff]:
        return self.session.exec(select(Staff).order_by(Staff.name)).all()

    def get(self, staff_id: str, for_update: bool = False) -> Staff | None:
        statement = select(Staff).where(Staff.id == staff_id)
        if for_update:
            statement = statement.with_for_update()
        return self.session.exec(statement).first()

    def get_by_username(self, username: str) -> Staff | None:
        return self.session.exec(select(Staff).where(Staff.username == username)).first()

    def add(self, staff: Staff) -> Staff:
        self.session.add(staff)
        self.session.flush()
        return staff

    def save(self, staff: Staff) -> Staff:
        _bump(staff)
        self.session.add(staff)
        self.session.flush()
        return staff

    def count_active(self) -> int:
        return self.session.exec(
            select(func.count()).select_from(Staff).where(Staff.is_active == True)  # noqa: E712
        ).one()


class SqlOrderRepository:
    def __init__(self, session: Session):
        self.session = session

    def list(self) -> Sequence[Order]:
        return self.session.exec(
            select(Order).order_by(Order.created_at.desc(), Order.order_number.desc())
        ).all()

    def list_active(self) -> Sequence[Order]:
        # Oldest first: the kitchen works the queue in arrival order
        return self.session.exec(
            select(Order)
            .where(Order.status.not_in(CLOSED_ORDER_STATUSES))
            .order_by(Order.created_at.asc(), Order.order_number.asc())
        ).all()

    def get(self, order_id: str, for_update: bool = False) -> Order | None:
        statement = select(Order).where(Order.id == order_id)
        if for_update:
            statement = statement.with_for_update()
        return self.session.exec(statement).first()

    def items_for(self, order_id: str) -> Sequence[OrderItem]:
        return self.session.exec(
            select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.line_number)
        ).all()

    def get_item(self, item_id: str) -> OrderItem | None:
        return self.session.get(OrderItem, item_id)

    def add(self, order: Order, items: Sequence[OrderItem]) -> Order:
        self.session.add(order)
        self.session.flush()
        for line_number, item in enumerate(items, start=1):
            item.order_id = order.id
            item.line_number = line_number
            self.session.add(item)
        self.session.flush()
        return order

    def save(self, order: Order) -> Order:
        _bump(order)
        self.session.add(order)
        self.session.flush()
        return order

    def save_item(self, item: OrderItem) -> OrderItem:
        self.session.add(item)
        self.session.flush()
        return item

    def count_active(self) -> int:
        return self.session.exec(
            select(func.count()).select_from(Order).where(Order.status.not_in(CLOSED_ORDER_STATUSES))
        ).one()

    def paid_total_between(self, start: datetime, end: datetime) -> int:
        """Sum of totals (cents) of paid orders created in [start, end)."""
        return self.session.exec(
            select(func.coalesce(func.sum(Order.total_cents), 0)).where(
                Order.created_at >= start,
                Order.created_at < end,
                Order.payment_status == PaymentStatus.paid,
            )
        ).one()


class SqlOrderNumberAllocator:
    """
    Order numbers from a counter row, incremented with a single
    UPDATE ... RETURNING so concurrent writers never see the same value.
    """

    def __init__(self, session: Session, start: int = 1000):
        self.session = session
        self.start = start

    def ensure_counter(self) -> None:
        if self.session.get(OrderCounter, ORDER_NUMBER_SEQUENCE) is not None:
            return
        # Continue after any existing orders (e.g. data loaded before the counter existed)
        highest = self.session.exec(select(func.max(Order.order_number))).one()
        seed = max(self.start - 1, highest or 0)
        self.session.add(OrderCounter(name=ORDER_NUMBER_SEQUENCE, value=seed))
        self.session.flush()

    def next_number(self) -> int:
        self.ensure_counter()
        statement = (
            update(OrderCounter)
            .where(OrderCounter.name == ORDER_NUMBER_SEQUENCE)
            .values(value=OrderCounter.value + 1)
            .returning(OrderCounter.value)
        )
        return self.session.exec(statement).scalar_one()
