"""
Catalog, table and staff maintenance.

Plain keyed collections: create, read, list and explicit partial updates.
None of these operations cascade into other entities.
"""

import logging

from .errors import ConflictError, NotFoundError, ValidationFailure
from .models import MenuCategory, MenuItem, Staff, Table
from .pricing import to_cents
from .schemas import (
    MenuCategoryCreate,
    MenuItemCreate,
    MenuItemUpdate,
    StaffCreate,
    StaffUpdate,
    TableCreate,
    TableUpdate,
)
from .security import get_password_hash
from .unit_of_work import UnitOfWork, check_revision

logger = logging.getLogger(__name__)


def _price_cents(amount) -> int:
    try:
        return to_cents(amount)
    except ValueError as e:
        raise ValidationFailure(str(e))


class CatalogService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def list_categories(self) -> list[MenuCategory]:
        return list(self.uow.catalog.list_categories())

    def create_category(self, data: MenuCategoryCreate) -> MenuCategory:
        with self.uow:
            category = self.uow.catalog.add_category(
                MenuCategory(name=data.name, icon=data.icon, order=data.order, is_active=data.is_active)
            )
            category_id = category.id
        return self.uow.catalog.get_category(category_id)

    def list_items(self, category_id: str | None = None) -> list[tuple[MenuItem, MenuCategory | None]]:
        """Menu items with their category, in display order."""
        categories = {category.id: category for category in self.uow.catalog.list_categories()}
        return [
            (item, categories.get(item.category_id))
            for item in self.uow.catalog.list_items(category_id)
        ]

    def get_item(self, item_id: str) -> MenuItem:
        item = self.uow.catalog.get_item(item_id)
        if item is None:
            raise NotFoundError("Menu item", item_id)
        return item

    def create_item(self, data: MenuItemCreate) -> MenuItem:
        with self.uow:
            if self.uow.catalog.get_category(data.category_id) is None:
                raise NotFoundError("Menu category", data.category_id)
            item = self.uow.catalog.add_item(
                MenuItem(
                    category_id=data.category_id,
                    name=data.name,
                    description=data.description,
                    price_cents=_price_cents(data.price),
                    image=data.image,
                    is_available=data.is_available,
                    preparation_time=data.preparation_time,
                    order=data.order,
                )
            )
            item_id = item.id
        logger.info(f"Menu item created: {data.name}")
        return self.get_item(item_id)

    def update_item(self, item_id: str, patch: MenuItemUpdate) -> MenuItem:
        """Existing orders keep the price they were placed with."""
        with self.uow:
            item = self.uow.catalog.get_item(item_id, for_update=True)
            if item is None:
                raise NotFoundError("Menu item", item_id)
            check_revision(item, patch.revision, "Menu item")

            changes = patch.changes()
            if "category_id" in changes and self.uow.catalog.get_category(changes["category_id"]) is None:
                raise NotFoundError("Menu category", changes["category_id"])
            if "price" in changes:
                if changes["price"] is None:
                    raise ValidationFailure("Price is required")
                item.price_cents = _price_cents(changes.pop("price"))
            for key, value in changes.items():
                if value is None and key in ("category_id", "name", "is_available", "order"):
                    raise ValidationFailure(f"{key} cannot be empty")
                setattr(item, key, value)
            self.uow.catalog.save_item(item)
        return self.get_item(item_id)


class TableService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def list_tables(self) -> list[Table]:
        return list(self.uow.tables.list())

    def get_table(self, table_id: str) -> Table:
        table = self.uow.tables.get(table_id)
        if table is None:
            raise NotFoundError("Table", table_id)
        return table

    def create_table(self, data: TableCreate) -> Table:
        with self.uow:
            if self.uow.tables.get_by_number(data.number) is not None:
                raise ConflictError(f"Table {data.number} already exists")
            table = self.uow.tables.add(
                Table(number=data.number, seats=data.seats, status=data.status, x=data.x, y=data.y)
            )
            table_id = table.id
        return self.get_table(table_id)

    def update_table(self, table_id: str, patch: TableUpdate) -> Table:
        """Manual override of status, seating or layout position."""
        with self.uow:
            table = self.uow.tables.get(table_id, for_update=True)
            if table is None:
                raise NotFoundError("Table", table_id)
            check_revision(table, patch.revision, "Table")

            for key, value in patch.changes().items():
                if value is None:
                    raise ValidationFailure(f"{key} cannot be empty")
                setattr(table, key, value)
            self.uow.tables.save(table)
            logger.info(f"Table {table.number} updated: status={table.status.value}")
        return self.get_table(table_id)


class StaffService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def list_staff(self) -> list[Staff]:
        return list(self.uow.staff.list())

    def get_staff(self, staff_id: str) -> Staff:
        staff = self.uow.staff.get(staff_id)
        if staff is None:
            raise NotFoundError("Staff", staff_id)
        return staff

    def get_by_username(self, username: str) -> Staff | None:
        return self.uow.staff.get_by_username(username)

    def create_staff(self, data: StaffCreate) -> Staff:
        with self.uow:
            if self.uow.staff.get_by_username(data.username) is not None:
                raise ConflictError(f"Username {data.username} is taken")
            staff = self.uow.staff.add(
                Staff(
                    username=data.username,
                    hashed_password=get_password_hash(data.password),
                    name=data.name,
                    role=data.role,
                    is_active=data.is_active,
                )
            )
            staff_id = staff.id
        logger.info(f"Staff account created: {data.username} ({data.role.value})")
        return self.get_staff(staff_id)

    def update_staff(self, staff_id: str, patch: StaffUpdate) -> Staff:
        """Name, role, active flag and password; username and id never change."""
        with self.uow:
            staff = self.uow.staff.get(staff_id, for_update=True)
            if staff is None:
                raise NotFoundError("Staff", staff_id)
            check_revision(staff, patch.revision, "Staff")

            changes = patch.changes()
            password = changes.pop("password", None)
            if password:
                staff.hashed_password = get_password_hash(password)
            for key, value in changes.items():
                if value is None:
                    raise ValidationFailure(f"{key} cannot be empty")
                setattr(staff, key, value)
            self.uow.staff.save(staff)
        return self.get_staff(staff_id)
