from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from .models import Staff
from .order_service import OrderService
from .permissions import Permissions
from .receipt_pdf import generate_receipt_pdf
from .schemas import (
    CheckoutRequest,
    OrderCreate,
    OrderItemStatusUpdate,
    OrderRead,
    OrderStatusUpdate,
    OrderUpdate,
)
from .security import PermissionChecker
from .settings import settings
from .unit_of_work import UnitOfWork, get_uow

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("", response_model=list[OrderRead])
def list_orders(
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.ORDERS_READ))],
    active: bool = Query(default=False),
    uow: UnitOfWork = Depends(get_uow),
):
    """
    All orders, newest first.

    With `active=true` only orders that are neither paid nor cancelled are
    returned, oldest first (kitchen queue order).
    """
    service = OrderService(uow)
    orders = service.get_active_orders() if active else service.get_orders()
    return [OrderRead.from_hydrated(order) for order in orders]


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: str,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.ORDERS_READ))],
    uow: UnitOfWork = Depends(get_uow),
):
    return OrderRead.from_hydrated(OrderService(uow).get_order(order_id))


@router.post("", response_model=OrderRead)
def create_order(
    order_data: OrderCreate,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.ORDERS_CREATE))],
    uow: UnitOfWork = Depends(get_uow),
):
    """Place an order; the staff member is the authenticated caller."""
    return OrderRead.from_hydrated(OrderService(uow).create_order(current_staff.id, order_data))


@router.patch("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: str,
    status_update: OrderStatusUpdate,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.ORDERS_UPDATE))],
    uow: UnitOfWork = Depends(get_uow),
):
    order = OrderService(uow).transition_status(
        order_id, status_update.status, expected_revision=status_update.revision
    )
    return OrderRead.from_hydrated(order)


@router.patch("/{order_id}", response_model=OrderRead)
def update_order(
    order_id: str,
    order_update: OrderUpdate,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.ORDERS_UPDATE))],
    uow: UnitOfWork = Depends(get_uow),
):
    order = OrderService(uow).update_order(
        order_id, order_update, expected_revision=order_update.revision
    )
    return OrderRead.from_hydrated(order)


@router.post("/{order_id}/checkout", response_model=OrderRead)
def checkout_order(
    order_id: str,
    checkout: CheckoutRequest,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.ORDERS_PAY))],
    uow: UnitOfWork = Depends(get_uow),
):
    """Simulated payment: no gateway is contacted."""
    order = OrderService(uow).checkout(
        order_id, checkout.payment_method, expected_revision=checkout.revision
    )
    return OrderRead.from_hydrated(order)


@router.patch("/{order_id}/items/{item_id}/status", response_model=OrderRead)
def update_order_item_status(
    order_id: str,
    item_id: str,
    status_update: OrderItemStatusUpdate,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.ORDERS_UPDATE))],
    uow: UnitOfWork = Depends(get_uow),
):
    order = OrderService(uow).update_item_status(order_id, item_id, status_update.status)
    return OrderRead.from_hydrated(order)


@router.get("/{order_id}/receipt.pdf")
def order_receipt_pdf(
    order_id: str,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.ORDERS_READ))],
    uow: UnitOfWork = Depends(get_uow),
):
    """Printable receipt built from the figures stored on the order."""
    order = OrderService(uow).get_order(order_id)
    pdf_buffer = generate_receipt_pdf(order, restaurant_name=settings.restaurant_name)
    filename = f"receipt_{order.order.order_number}.pdf"
    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
