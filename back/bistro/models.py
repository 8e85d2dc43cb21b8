from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def _uuid() -> str:
    return str(uuid4())


def local_now() -> datetime:
    """Server-local wall clock time (naive); day boundaries follow the server clock."""
    return datetime.now()


# Timestamps are server-local wall clock; columns hold them without an offset
NAIVE_DATETIME = DateTime(timezone=False)


class StaffRole(str, Enum):
    server = "server"
    manager = "manager"
    admin = "admin"
    kitchen = "kitchen"


class TableStatus(str, Enum):
    available = "available"
    occupied = "occupied"
    reserved = "reserved"
    cleaning = "cleaning"


class OrderStatus(str, Enum):
    pending = "pending"
    preparing = "preparing"
    ready = "ready"
    served = "served"
    paid = "paid"
    cancelled = "cancelled"


# Orders in these states no longer count as active
CLOSED_ORDER_STATUSES = (OrderStatus.paid, OrderStatus.cancelled)


class OrderItemStatus(str, Enum):
    pending = "pending"
    preparing = "preparing"
    ready = "ready"


class PaymentMethod(str, Enum):
    cash = "cash"
    card = "card"
    mobile = "mobile"
    gift_card = "gift_card"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"


class Staff(SQLModel, table=True):
    id: str = Field(default_factory=_uuid, primary_key=True)
    username: str = Field(unique=True, index=True)
    hashed_password: str
    name: str
    role: StaffRole = Field(default=StaffRole.server)
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=local_now, sa_type=NAIVE_DATETIME)
    revision: int = Field(default=1)


class MenuCategory(SQLModel, table=True):
    __tablename__ = "menu_category"

    id: str = Field(default_factory=_uuid, primary_key=True)
    name: str
    icon: str
    order: int = Field(default=0)
    is_active: bool = Field(default=True)


class MenuItem(SQLModel, table=True):
    __tablename__ = "menu_item"

    id: str = Field(default_factory=_uuid, primary_key=True)
    category_id: str = Field(foreign_key="menu_category.id", index=True)
    name: str
    description: str | None = None
    price_cents: int = Field(ge=0)
    image: str | None = None
    is_available: bool = Field(default=True)
    preparation_time: int | None = Field(default=15)  # minutes
    order: int = Field(default=0)
    revision: int = Field(default=1)


class Table(SQLModel, table=True):
    __tablename__ = "dining_table"

    id: str = Field(default_factory=_uuid, primary_key=True)
    number: int = Field(unique=True, index=True)
    seats: int = Field(default=4)
    status: TableStatus = Field(default=TableStatus.available, index=True)
    # Grid position on the floor layout
    x: int = Field(default=0)
    y: int = Field(default=0)
    revision: int = Field(default=1)


class Order(SQLModel, table=True):
    __tablename__ = "customer_order"

    id: str = Field(default_factory=_uuid, primary_key=True)
    order_number: int = Field(unique=True, index=True)
    table_id: str | None = Field(default=None, foreign_key="dining_table.id", index=True)
    staff_id: str = Field(foreign_key="staff.id")
    customer_name: str | None = None
    status: OrderStatus = Field(default=OrderStatus.pending, index=True)

    # Charges, fixed at creation time
    subtotal_cents: int
    tax_cents: int
    service_charge_cents: int = Field(default=0)
    total_cents: int

    payment_method: PaymentMethod | None = None
    payment_status: PaymentStatus = Field(default=PaymentStatus.pending)
    notes: str | None = None
    created_at: datetime = Field(default_factory=local_now, sa_type=NAIVE_DATETIME, index=True)
    updated_at: datetime = Field(default_factory=local_now, sa_type=NAIVE_DATETIME)
    revision: int = Field(default=1)


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_item"

    id: str = Field(default_factory=_uuid, primary_key=True)
    order_id: str = Field(foreign_key="customer_order.id", index=True)
    menu_item_id: str = Field(foreign_key="menu_item.id")
    line_number: int = Field(default=0)
    quantity: int = Field(default=1, ge=1)
    price_cents: int  # Snapshot of the menu price at order time
    modifications: str | None = None
    status: OrderItemStatus = Field(default=OrderItemStatus.pending)


class OrderCounter(SQLModel, table=True):
    """Last order number handed out, one row per sequence name."""
    __tablename__ = "order_counter"

    name: str = Field(primary_key=True)
    value: int
