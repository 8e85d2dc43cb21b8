from typing import Annotated

from fastapi import APIRouter, Depends, Query

from .models import Staff
from .permissions import Permissions
from .schemas import (
    MenuCategoryCreate,
    MenuCategoryRead,
    MenuItemCreate,
    MenuItemRead,
    MenuItemUpdate,
)
from .security import PermissionChecker
from .stores import CatalogService
from .unit_of_work import UnitOfWork, get_uow

router = APIRouter(prefix="/menu", tags=["Menu"])


# ============ CATEGORIES ============

@router.get("/categories", response_model=list[MenuCategoryRead])
def list_categories(
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.MENU_READ))],
    uow: UnitOfWork = Depends(get_uow),
):
    return [MenuCategoryRead.from_model(c) for c in CatalogService(uow).list_categories()]


@router.post("/categories", response_model=MenuCategoryRead)
def create_category(
    category_data: MenuCategoryCreate,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.MENU_MANAGE))],
    uow: UnitOfWork = Depends(get_uow),
):
    return MenuCategoryRead.from_model(CatalogService(uow).create_category(category_data))


# ============ ITEMS ============

@router.get("/items", response_model=list[MenuItemRead])
def list_items(
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.MENU_READ))],
    category_id: str | None = Query(default=None, alias="categoryId"),
    uow: UnitOfWork = Depends(get_uow),
):
    """Menu items in display order, each with its category embedded."""
    return [
        MenuItemRead.from_model(item, category)
        for item, category in CatalogService(uow).list_items(category_id)
    ]


@router.get("/items/{item_id}", response_model=MenuItemRead)
def get_item(
    item_id: str,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.MENU_READ))],
    uow: UnitOfWork = Depends(get_uow),
):
    item = CatalogService(uow).get_item(item_id)
    return MenuItemRead.from_model(item, uow.catalog.get_category(item.category_id))


@router.post("/items", response_model=MenuItemRead)
def create_item(
    item_data: MenuItemCreate,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.MENU_MANAGE))],
    uow: UnitOfWork = Depends(get_uow),
):
    item = CatalogService(uow).create_item(item_data)
    return MenuItemRead.from_model(item, uow.catalog.get_category(item.category_id))


@router.patch("/items/{item_id}", response_model=MenuItemRead)
def update_item(
    item_id: str,
    item_update: MenuItemUpdate,
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.MENU_MANAGE))],
    uow: UnitOfWork = Depends(get_uow),
):
    item = CatalogService(uow).update_item(item_id, item_update)
    return MenuItemRead.from_model(item, uow.catalog.get_category(item.category_id))
