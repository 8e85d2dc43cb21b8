"""
Request and response bodies.

JSON keys are camelCase on the wire; money is always a fixed-point string
such as "16.50".
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import (
    MenuCategory,
    MenuItem,
    OrderItemStatus,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Staff,
    StaffRole,
    Table,
    TableStatus,
)
from .pricing import format_cents


class APIModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PatchModel(APIModel):
    """Update commands: unknown fields are rejected instead of merged."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    # Optional optimistic-concurrency token; a stale value is a 409
    revision: int | None = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"revision"})


# ============ AUTH ============

class LoginRequest(APIModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class StaffSummary(APIModel):
    id: str
    name: str
    role: StaffRole
    username: str


class LoginResponse(APIModel):
    success: bool = True
    staff: StaffSummary


# ============ STAFF ============

class StaffCreate(APIModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: StaffRole = StaffRole.server
    is_active: bool = True


class StaffUpdate(PatchModel):
    name: str | None = Field(default=None, min_length=1)
    role: StaffRole | None = None
    is_active: bool | None = None
    password: str | None = Field(default=None, min_length=1)


class StaffRead(APIModel):
    id: str
    username: str
    name: str
    role: StaffRole
    is_active: bool
    created_at: datetime | None = None
    revision: int

    @classmethod
    def from_model(cls, staff: Staff) -> "StaffRead":
        return cls(
            id=staff.id,
            username=staff.username,
            name=staff.name,
            role=staff.role,
            is_active=staff.is_active,
            created_at=staff.created_at,
            revision=staff.revision,
        )


# ============ MENU ============

class MenuCategoryCreate(APIModel):
    name: str = Field(min_length=1)
    icon: str
    order: int = 0
    is_active: bool = True


class MenuCategoryRead(APIModel):
    id: str
    name: str
    icon: str
    order: int
    is_active: bool

    @classmethod
    def from_model(cls, category: MenuCategory) -> "MenuCategoryRead":
        return cls(
            id=category.id,
            name=category.name,
            icon=category.icon,
            order=category.order,
            is_active=category.is_active,
        )


class MenuItemCreate(APIModel):
    category_id: str
    name: str = Field(min_length=1)
    description: str | None = None
    price: Decimal = Field(ge=0, decimal_places=2)
    image: str | None = None
    is_available: bool = True
    preparation_time: int | None = Field(default=15, ge=0)
    order: int = 0


class MenuItemUpdate(PatchModel):
    category_id: str | None = None
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    image: str | None = None
    is_available: bool | None = None
    preparation_time: int | None = Field(default=None, ge=0)
    order: int | None = None


class MenuItemRead(APIModel):
    id: str
    category_id: str
    name: str
    description: str | None = None
    price: str
    image: str | None = None
    is_available: bool
    preparation_time: int | None = None
    order: int
    revision: int
    category: MenuCategoryRead | None = None

    @classmethod
    def from_model(cls, item: MenuItem, category: MenuCategory | None = None) -> "MenuItemRead":
        return cls(
            id=item.id,
            category_id=item.category_id,
            name=item.name,
            description=item.description,
            price=format_cents(item.price_cents),
            image=item.image,
            is_available=item.is_available,
            preparation_time=item.preparation_time,
            order=item.order,
            revision=item.revision,
            category=MenuCategoryRead.from_model(category) if category else None,
        )


# ============ TABLES ============

class TableCreate(APIModel):
    number: int = Field(ge=1)
    seats: int = Field(default=4, ge=1)
    status: TableStatus = TableStatus.available
    x: int = 0
    y: int = 0


class TableUpdate(PatchModel):
    seats: int | None = Field(default=None, ge=1)
    status: TableStatus | None = None
    x: int | None = None
    y: int | None = None


class TableRead(APIModel):
    id: str
    number: int
    seats: int
    status: TableStatus
    x: int
    y: int
    revision: int

    @classmethod
    def from_model(cls, table: Table) -> "TableRead":
        return cls(
            id=table.id,
            number=table.number,
            seats=table.seats,
            status=table.status,
            x=table.x,
            y=table.y,
            revision=table.revision,
        )


# ============ ORDERS ============

class OrderItemCreate(APIModel):
    menu_item_id: str
    quantity: int = Field(default=1, ge=1)
    modifications: str | None = None


class OrderCreate(APIModel):
    table_id: str | None = None
    customer_name: str | None = None
    notes: str | None = None
    items: list[OrderItemCreate] = Field(min_length=1)


class OrderStatusUpdate(APIModel):
    status: OrderStatus
    revision: int | None = None


class OrderUpdate(PatchModel):
    """Fields of an order that may change after it was placed."""
    payment_method: PaymentMethod | None = None
    payment_status: PaymentStatus | None = None
    notes: str | None = None
    customer_name: str | None = None


class CheckoutRequest(APIModel):
    payment_method: PaymentMethod
    revision: int | None = None


class OrderItemStatusUpdate(APIModel):
    status: OrderItemStatus


class OrderItemRead(APIModel):
    id: str
    order_id: str
    menu_item_id: str
    quantity: int
    price: str
    modifications: str | None = None
    status: OrderItemStatus
    menu_item: MenuItemRead | None = None


class OrderRead(APIModel):
    id: str
    order_number: int
    table_id: str | None = None
    staff_id: str
    customer_name: str | None = None
    status: OrderStatus
    subtotal: str
    tax: str
    service_charge: str
    total: str
    payment_method: PaymentMethod | None = None
    payment_status: PaymentStatus
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    revision: int
    items: list[OrderItemRead] = []
    table: TableRead | None = None
    staff: StaffRead | None = None

    @classmethod
    def from_hydrated(cls, hydrated) -> "OrderRead":
        order = hydrated.order
        return cls(
            id=order.id,
            order_number=order.order_number,
            table_id=order.table_id,
            staff_id=order.staff_id,
            customer_name=order.customer_name,
            status=order.status,
            subtotal=format_cents(order.subtotal_cents),
            tax=format_cents(order.tax_cents),
            service_charge=format_cents(order.service_charge_cents),
            total=format_cents(order.total_cents),
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            notes=order.notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
            revision=order.revision,
            items=[
                OrderItemRead(
                    id=line.item.id,
                    order_id=line.item.order_id,
                    menu_item_id=line.item.menu_item_id,
                    quantity=line.item.quantity,
                    price=format_cents(line.item.price_cents),
                    modifications=line.item.modifications,
                    status=line.item.status,
                    menu_item=MenuItemRead.from_model(line.menu_item) if line.menu_item else None,
                )
                for line in hydrated.items
            ],
            table=TableRead.from_model(hydrated.table) if hydrated.table else None,
            staff=StaffRead.from_model(hydrated.staff) if hydrated.staff else None,
        )


# ============ STATS ============

class DailyStatsRead(APIModel):
    daily_sales: str
    active_orders: int
    table_occupancy: int
    staff_online: int
