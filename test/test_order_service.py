from datetime import timedelta

import pytest

from bistro.errors import ConflictError, InvalidTransition, NotFoundError, ValidationFailure
from bistro.models import (
    MenuItem,
    Order,
    OrderItemStatus,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Table,
    TableStatus,
)
from bistro.order_service import OrderService, can_transition
from bistro.schemas import MenuItemUpdate, OrderCreate, OrderItemCreate, OrderUpdate
from bistro.stores import CatalogService
from sqlmodel import select


def order_for(menu, table=None, **quantities) -> OrderCreate:
    return OrderCreate(
        table_id=table.id if table else None,
        items=[
            OrderItemCreate(menu_item_id=menu[name].id, quantity=quantity)
            for name, quantity in quantities.items()
        ],
    )


def walk_to(service: OrderService, order_id: str, *statuses: OrderStatus):
    order = None
    for status in statuses:
        order = service.transition_status(order_id, status)
    return order


SERVE = (OrderStatus.preparing, OrderStatus.ready, OrderStatus.served)


# ============ CREATE ============

def test_create_order_prices_and_occupies_table(uow, manager, menu, table):
    service = OrderService(uow)

    created = service.create_order(manager.id, order_for(menu, table, burger=1, salad=1, coffee=3))

    order = created.order
    assert order.order_number == 1000
    assert order.status == OrderStatus.pending
    assert order.payment_status == PaymentStatus.pending
    assert order.subtotal_cents == 4250
    assert order.tax_cents == 351
    assert order.service_charge_cents == 213
    assert order.total_cents == 4814
    assert [line.item.quantity for line in created.items] == [1, 1, 3]
    assert all(line.item.status == OrderItemStatus.pending for line in created.items)
    assert created.staff.id == manager.id
    assert created.table.status == TableStatus.occupied


def test_order_numbers_increase(uow, manager, menu):
    service = OrderService(uow)

    first = service.create_order(manager.id, order_for(menu, burger=1))
    second = service.create_order(manager.id, order_for(menu, coffee=1))

    assert first.table is None
    assert second.order.order_number == first.order.order_number + 1


def test_item_prices_are_snapshotted(uow, manager, menu):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, burger=2))

    CatalogService(uow).update_item(menu["burger"].id, MenuItemUpdate(price="20.00"))

    reloaded = service.get_order(created.order.id)
    assert reloaded.items[0].item.price_cents == 1650
    assert reloaded.items[0].menu_item.price_cents == 2000
    assert reloaded.order.subtotal_cents == 3300


def test_unknown_menu_item_persists_nothing(uow, session, manager, menu, table):
    service = OrderService(uow)
    order_data = OrderCreate(
        table_id=table.id,
        items=[
            OrderItemCreate(menu_item_id=menu["burger"].id, quantity=1),
            OrderItemCreate(menu_item_id="no-such-item", quantity=1),
        ],
    )

    with pytest.raises(NotFoundError):
        service.create_order(manager.id, order_data)

    assert session.exec(select(Order)).all() == []
    assert session.get(Table, table.id).status == TableStatus.available


def test_unknown_table_is_not_found(uow, manager, menu):
    order_data = OrderCreate(
        table_id="no-such-table",
        items=[OrderItemCreate(menu_item_id=menu["burger"].id)],
    )

    with pytest.raises(NotFoundError):
        OrderService(uow).create_order(manager.id, order_data)


def test_unknown_staff_is_not_found(uow, menu):
    with pytest.raises(NotFoundError):
        OrderService(uow).create_order("no-such-staff", order_for(menu, burger=1))


def test_unavailable_item_is_rejected(uow, manager, menu):
    with pytest.raises(ValidationFailure):
        OrderService(uow).create_order(manager.id, order_for(menu, soup=1))


def test_empty_order_is_rejected(uow, manager):
    order_data = OrderCreate.model_construct(table_id=None, customer_name=None, notes=None, items=[])

    with pytest.raises(ValidationFailure):
        OrderService(uow).create_order(manager.id, order_data)


# ============ STATUS ============

@pytest.mark.parametrize(
    "current, new, allowed",
    [
        (OrderStatus.pending, OrderStatus.preparing, True),
        (OrderStatus.served, OrderStatus.paid, True),
        (OrderStatus.ready, OrderStatus.cancelled, True),
        (OrderStatus.pending, OrderStatus.paid, False),
        (OrderStatus.ready, OrderStatus.preparing, False),
        (OrderStatus.paid, OrderStatus.cancelled, False),
        (OrderStatus.cancelled, OrderStatus.pending, False),
        (OrderStatus.paid, OrderStatus.paid, True),
    ],
)
def test_can_transition(current, new, allowed):
    assert can_transition(current, new) is allowed


def test_paying_frees_table_and_marks_payment(uow, manager, menu, table):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, table, burger=1))

    paid = walk_to(service, created.order.id, *SERVE, OrderStatus.paid)

    assert paid.order.status == OrderStatus.paid
    assert paid.order.payment_status == PaymentStatus.paid
    assert paid.table.status == TableStatus.available
    # Charges never change after creation
    assert paid.order.total_cents == created.order.total_cents


def test_paying_twice_is_a_no_op(uow, manager, menu, table):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, table, burger=1))
    paid = walk_to(service, created.order.id, *SERVE, OrderStatus.paid)
    revision = paid.order.revision

    again = service.transition_status(created.order.id, OrderStatus.paid)

    assert again.order.status == OrderStatus.paid
    assert again.order.revision == revision
    assert again.table.status == TableStatus.available


def test_skipping_a_step_is_rejected(uow, manager, menu):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, burger=1))

    with pytest.raises(InvalidTransition):
        service.transition_status(created.order.id, OrderStatus.paid)

    assert service.get_order(created.order.id).order.status == OrderStatus.pending


def test_cancel_leaves_table_alone(uow, manager, menu, table):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, table, burger=1))

    cancelled = service.transition_status(created.order.id, OrderStatus.cancelled)

    assert cancelled.order.status == OrderStatus.cancelled
    assert cancelled.table.status == TableStatus.occupied
    with pytest.raises(InvalidTransition):
        service.transition_status(created.order.id, OrderStatus.preparing)


def test_unknown_order_is_not_found(uow):
    with pytest.raises(NotFoundError):
        OrderService(uow).transition_status("no-such-order", OrderStatus.preparing)


def test_interrupted_cascade_leaves_order_unchanged(uow, session, manager, menu, table, monkeypatch):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, table, burger=1))
    walk_to(service, created.order.id, *SERVE)

    def failing_save(table):
        raise RuntimeError("table store unavailable")

    monkeypatch.setattr(uow.tables, "save", failing_save)

    with pytest.raises(RuntimeError):
        service.transition_status(created.order.id, OrderStatus.paid)

    reloaded = service.get_order(created.order.id)
    assert reloaded.order.status == OrderStatus.served
    assert reloaded.order.payment_status == PaymentStatus.pending
    assert session.get(Table, table.id).status == TableStatus.occupied


def test_stale_revision_is_a_conflict(uow, manager, menu):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, burger=1))
    revision = created.order.revision

    service.transition_status(created.order.id, OrderStatus.preparing, expected_revision=revision)

    with pytest.raises(ConflictError):
        service.transition_status(created.order.id, OrderStatus.ready, expected_revision=revision)


# ============ CHECKOUT & UPDATES ============

def test_checkout_served_order(uow, manager, menu, table):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, table, salad=2))
    walk_to(service, created.order.id, *SERVE)

    paid = service.checkout(created.order.id, PaymentMethod.card)

    assert paid.order.status == OrderStatus.paid
    assert paid.order.payment_status == PaymentStatus.paid
    assert paid.order.payment_method == PaymentMethod.card
    assert paid.table.status == TableStatus.available

    with pytest.raises(ConflictError):
        service.checkout(created.order.id, PaymentMethod.cash)


def test_checkout_requires_served(uow, manager, menu):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, coffee=1))

    with pytest.raises(InvalidTransition):
        service.checkout(created.order.id, PaymentMethod.cash)


def test_update_order_keeps_totals(uow, manager, menu):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, burger=1))

    updated = service.update_order(
        created.order.id,
        OrderUpdate(notes="No onions", customer_name="Alex", payment_method=PaymentMethod.cash),
    )

    assert updated.order.notes == "No onions"
    assert updated.order.customer_name == "Alex"
    assert updated.order.payment_method == PaymentMethod.cash
    assert updated.order.total_cents == created.order.total_cents
    assert updated.order.order_number == created.order.order_number
    assert updated.order.updated_at >= created.order.created_at


def test_update_item_status(uow, manager, menu):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, burger=1, coffee=1))
    coffee_line = created.items[1].item

    updated = service.update_item_status(created.order.id, coffee_line.id, OrderItemStatus.ready)

    assert [line.item.status for line in updated.items] == [OrderItemStatus.pending, OrderItemStatus.ready]


def test_update_item_status_of_other_order_is_not_found(uow, manager, menu):
    service = OrderService(uow)
    first = service.create_order(manager.id, order_for(menu, burger=1))
    second = service.create_order(manager.id, order_for(menu, coffee=1))

    with pytest.raises(NotFoundError):
        service.update_item_status(first.order.id, second.items[0].item.id, OrderItemStatus.ready)


# ============ READS ============

def test_active_orders_oldest_first(uow, session, manager, menu):
    service = OrderService(uow)
    first = service.create_order(manager.id, order_for(menu, burger=1))
    second = service.create_order(manager.id, order_for(menu, salad=1))
    third = service.create_order(manager.id, order_for(menu, coffee=1))
    done = service.create_order(manager.id, order_for(menu, coffee=1))

    # Make the second order the oldest
    second_order = session.get(Order, second.order.id)
    second_order.created_at = first.order.created_at - timedelta(minutes=5)
    session.add(second_order)
    session.commit()
    service.transition_status(done.order.id, OrderStatus.cancelled)

    active = [hydrated.order.id for hydrated in service.get_active_orders()]

    assert active == [second.order.id, first.order.id, third.order.id]


def test_orders_newest_first(uow, manager, menu):
    service = OrderService(uow)
    first = service.create_order(manager.id, order_for(menu, burger=1))
    second = service.create_order(manager.id, order_for(menu, coffee=1))

    orders = [hydrated.order.id for hydrated in service.get_orders()]

    assert orders == [second.order.id, first.order.id]


def test_hydration_uses_current_menu_item(uow, session, manager, menu):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, burger=1))

    item = session.get(MenuItem, menu["burger"].id)
    item.name = "Double Burger"
    session.add(item)
    session.commit()

    assert service.get_order(created.order.id).items[0].menu_item.name == "Double Burger"


def test_update_order_refuses_payment_status_shortcuts(uow, manager, menu):
    service = OrderService(uow)
    created = service.create_order(manager.id, order_for(menu, burger=1))

    with pytest.raises(ValidationFailure):
        service.update_order(created.order.id, OrderUpdate(payment_status=None))
    with pytest.raises(ValidationFailure):
        service.update_order(created.order.id, OrderUpdate(payment_status=PaymentStatus.paid))

    reloaded = service.get_order(created.order.id)
    assert reloaded.order.payment_status == PaymentStatus.pending
    assert reloaded.order.status == OrderStatus.pending


def test_timestamps_are_stored_without_offset(uow, session, manager, menu):
    for column in (Order.__table__.c.created_at, Order.__table__.c.updated_at):
        assert column.type.timezone is False

    created = OrderService(uow).create_order(manager.id, order_for(menu, coffee=1))
    session.expire_all()

    stored = session.get(Order, created.order.id)
    assert stored.created_at.tzinfo is None
    assert manager.created_at.tzinfo is None
