"""
Order Service

Order lifecycle rules:
- Order creation from cart lines (price snapshot, pricing, numbering)
- Status transitions along pending -> preparing -> ready -> served -> paid
- Table occupancy cascades (occupy on create, free on payment)
- Simulated checkout
- Read-time hydration of items, table and staff
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from .errors import ConflictError, InvalidTransition, NotFoundError, ValidationFailure
from .models import (
    CLOSED_ORDER_STATUSES,
    MenuItem,
    Order,
    OrderItem,
    OrderItemStatus,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Staff,
    Table,
    TableStatus,
    local_now,
)
from .pricing import calculate_totals
from .schemas import OrderCreate, OrderUpdate
from .settings import settings
from .unit_of_work import UnitOfWork, check_revision

logger = logging.getLogger(__name__)


# Allowed next states; re-applying the current status is accepted as a no-op
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.pending: frozenset({OrderStatus.preparing, OrderStatus.cancelled}),
    OrderStatus.preparing: frozenset({OrderStatus.ready, OrderStatus.cancelled}),
    OrderStatus.ready: frozenset({OrderStatus.served, OrderStatus.cancelled}),
    OrderStatus.served: frozenset({OrderStatus.paid, OrderStatus.cancelled}),
    OrderStatus.paid: frozenset(),
    OrderStatus.cancelled: frozenset(),
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return new == current or new in ALLOWED_TRANSITIONS[current]


@dataclass
class HydratedOrderItem:
    item: OrderItem
    menu_item: MenuItem | None


@dataclass
class HydratedOrder:
    order: Order
    items: list[HydratedOrderItem] = field(default_factory=list)
    table: Table | None = None
    staff: Staff | None = None


class OrderService:
    def __init__(
        self,
        uow: UnitOfWork,
        tax_rate: Decimal | None = None,
        service_charge_rate: Decimal | None = None,
    ):
        self.uow = uow
        self.tax_rate = settings.tax_rate if tax_rate is None else tax_rate
        self.service_charge_rate = (
            settings.service_charge_rate if service_charge_rate is None else service_charge_rate
        )

    # ============ CREATE ============

    def create_order(self, staff_id: str, order_data: OrderCreate) -> HydratedOrder:
        """
        Place a new order for a table (or take-away when no table is given).

        Everything happens in one unit of work: if any line references an
        unknown menu item, nothing is persisted and no table changes.
        """
        if not order_data.items:
            raise ValidationFailure("At least one item is required")
        for line in order_data.items:
            if line.quantity < 1:
                raise ValidationFailure("Item quantity must be at least 1")

        with self.uow:
            if self.uow.staff.get(staff_id) is None:
                raise NotFoundError("Staff", staff_id)

            table = None
            if order_data.table_id:
                table = self.uow.tables.get(order_data.table_id, for_update=True)
                if table is None:
                    raise NotFoundError("Table", order_data.table_id)

            menu_items = self.uow.catalog.get_items([line.menu_item_id for line in order_data.items])
            for line in order_data.items:
                menu_item = menu_items.get(line.menu_item_id)
                if menu_item is None:
                    raise NotFoundError("Menu item", line.menu_item_id)
                if not menu_item.is_available:
                    raise ValidationFailure(f"{menu_item.name} is not available")

            # Prices are snapshotted now; later catalog edits never touch this order
            items = [
                OrderItem(
                    menu_item_id=line.menu_item_id,
                    quantity=line.quantity,
                    price_cents=menu_items[line.menu_item_id].price_cents,
                    modifications=line.modifications,
                    status=OrderItemStatus.pending,
                )
                for line in order_data.items
            ]
            breakdown = calculate_totals(
                ((item.price_cents, item.quantity) for item in items),
                tax_rate=self.tax_rate,
                service_charge_rate=self.service_charge_rate,
            )

            now = local_now()
            order = Order(
                order_number=self.uow.order_numbers.next_number(),
                table_id=table.id if table else None,
                staff_id=staff_id,
                customer_name=order_data.customer_name,
                notes=order_data.notes,
                status=OrderStatus.pending,
                payment_status=PaymentStatus.pending,
                subtotal_cents=breakdown.subtotal_cents,
                tax_cents=breakdown.tax_cents,
                service_charge_cents=breakdown.service_charge_cents,
                total_cents=breakdown.total_cents,
                created_at=now,
                updated_at=now,
            )
            self.uow.orders.add(order, items)

            if table is not None:
                table.status = TableStatus.occupied
                self.uow.tables.save(table)

            order_id = order.id
            order_number = order.order_number

        logger.info(
            f"Order #{order_number} created ({len(items)} lines, "
            f"table={table.number if table else 'take-away'})"
        )
        return self.get_order(order_id)

    # ============ STATUS ============

    def transition_status(
        self,
        order_id: str,
        new_status: OrderStatus,
        expected_revision: int | None = None,
    ) -> HydratedOrder:
        """
        Move an order to its next status.

        Paying an order also marks its payment as paid and frees its table,
        in the same transaction as the status write.
        """
        with self.uow:
            order = self._get_for_update(order_id)
            check_revision(order, expected_revision, "Order")

            if new_status == order.status:
                logger.info(f"Order #{order.order_number} already {new_status.value}")
            else:
                if not can_transition(order.status, new_status):
                    raise InvalidTransition(order.status.value, new_status.value)
                previous = order.status
                self._apply_status(order, new_status)
                logger.info(
                    f"Order #{order.order_number}: {previous.value} -> {new_status.value}"
                )

        return self.get_order(order_id)

    def checkout(
        self,
        order_id: str,
        payment_method: PaymentMethod,
        expected_revision: int | None = None,
    ) -> HydratedOrder:
        """Record a (simulated) payment and close a served order."""
        with self.uow:
            order = self._get_for_update(order_id)
            check_revision(order, expected_revision, "Order")

            if order.status == OrderStatus.paid or order.payment_status == PaymentStatus.paid:
                raise ConflictError(f"Order #{order.order_number} is already paid")
            if not can_transition(order.status, OrderStatus.paid):
                raise InvalidTransition(order.status.value, OrderStatus.paid.value)

            order.payment_method = payment_method
            self._apply_status(order, OrderStatus.paid)

        logger.info(f"Order #{order.order_number} paid by {payment_method.value}")
        return self.get_order(order_id)

    def _apply_status(self, order: Order, new_status: OrderStatus) -> None:
        order.status = new_status
        order.updated_at = local_now()
        if new_status == OrderStatus.paid:
            order.payment_status = PaymentStatus.paid
        self.uow.orders.save(order)

        if new_status == OrderStatus.paid and order.table_id:
            self._free_table(order)

    def _free_table(self, order: Order) -> None:
        table = self.uow.tables.get(order.table_id, for_update=True)
        if table is None:
            raise NotFoundError("Table", order.table_id)
        if table.status != TableStatus.available:
            table.status = TableStatus.available
            self.uow.tables.save(table)
            logger.info(f"Table {table.number} freed by order #{order.order_number}")

    # ============ UPDATES ============

    def update_order(
        self,
        order_id: str,
        patch: OrderUpdate,
        expected_revision: int | None = None,
    ) -> HydratedOrder:
        """
        Patch the mutable order fields (payment details, notes, customer name).

        Totals, items and the order number never change here. Payments go
        through checkout or the paid status, not through payment_status.
        """
        with self.uow:
            order = self._get_for_update(order_id)
            check_revision(order, expected_revision, "Order")

            changes = patch.changes()
            if "payment_status" in changes:
                payment_status = changes["payment_status"]
                if payment_status is None:
                    raise ValidationFailure("payment_status cannot be empty")
                if payment_status == PaymentStatus.paid and order.payment_status != PaymentStatus.paid:
                    raise ValidationFailure(
                        f"Order #{order.order_number} is paid through checkout, not by editing it"
                    )
            for key, value in changes.items():
                setattr(order, key, value)
            order.updated_at = local_now()
            self.uow.orders.save(order)

        return self.get_order(order_id)

    def update_item_status(
        self,
        order_id: str,
        item_id: str,
        status: OrderItemStatus,
    ) -> HydratedOrder:
        """Kitchen progress for a single line, independent of the order status."""
        with self.uow:
            order = self._get_for_update(order_id)
            item = self.uow.orders.get_item(item_id)
            if item is None or item.order_id != order.id:
                raise NotFoundError("Order item", item_id)
            if order.status in CLOSED_ORDER_STATUSES:
                raise ValidationFailure(
                    f"Order #{order.order_number} is {order.status.value}; its items can no longer change"
                )

            item.status = status
            self.uow.orders.save_item(item)
            order.updated_at = local_now()
            self.uow.orders.save(order)

        return self.get_order(order_id)

    # ============ READS ============

    def get_order(self, order_id: str) -> HydratedOrder:
        order = self.uow.orders.get(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return self._hydrate([order])[0]

    def get_orders(self) -> list[HydratedOrder]:
        return self._hydrate(self.uow.orders.list())

    def get_active_orders(self) -> list[HydratedOrder]:
        """Orders not yet paid or cancelled, oldest first."""
        return self._hydrate(self.uow.orders.list_active())

    def _get_for_update(self, order_id: str) -> Order:
        order = self.uow.orders.get(order_id, for_update=True)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def _hydrate(self, orders: Iterable[Order]) -> list[HydratedOrder]:
        """Resolve items, menu items, table and staff against current store state."""
        orders = list(orders)
        items_by_order = {order.id: list(self.uow.orders.items_for(order.id)) for order in orders}
        menu_items = self.uow.catalog.get_items(
            _unique(item.menu_item_id for items in items_by_order.values() for item in items)
        )
        tables: dict[str, Table | None] = {}
        staff: dict[str, Staff | None] = {}

        result = []
        for order in orders:
            if order.table_id and order.table_id not in tables:
                tables[order.table_id] = self.uow.tables.get(order.table_id)
            if order.staff_id not in staff:
                staff[order.staff_id] = self.uow.staff.get(order.staff_id)
            result.append(
                HydratedOrder(
                    order=order,
                    items=[
                        HydratedOrderItem(item=item, menu_item=menu_items.get(item.menu_item_id))
                        for item in items_by_order[order.id]
                    ],
                    table=tables.get(order.table_id) if order.table_id else None,
                    staff=staff.get(order.staff_id),
                )
            )
        return result


def _unique(values: Iterable[str]) -> Sequence[str]:
    return list(dict.fromkeys(values))
