from enum import Enum
from typing import Set

from .models import Staff, StaffRole


class Permissions(str, Enum):
    # Orders
    ORDERS_READ = "orders:read"
    ORDERS_CREATE = "orders:create"
    ORDERS_UPDATE = "orders:update"
    ORDERS_PAY = "orders:pay"

    # Menu
    MENU_READ = "menu:read"
    MENU_MANAGE = "menu:manage"

    # Tables
    TABLES_READ = "tables:read"
    TABLES_MANAGE = "tables:manage"

    # Staff
    STAFF_READ = "staff:read"
    STAFF_MANAGE = "staff:manage"

    # Dashboard figures
    STATS_READ = "stats:read"


_FLOOR = {
    Permissions.ORDERS_READ,
    Permissions.ORDERS_CREATE,
    Permissions.ORDERS_UPDATE,
    Permissions.ORDERS_PAY,
    Permissions.MENU_READ,
    Permissions.TABLES_READ,
    Permissions.TABLES_MANAGE,
    Permissions.STATS_READ,
}

ROLE_PERMISSIONS: dict[StaffRole, Set[Permissions]] = {
    StaffRole.server: _FLOOR,
    # Kitchen moves tickets along but does not take payment or seat guests
    StaffRole.kitchen: {
        Permissions.ORDERS_READ,
        Permissions.ORDERS_UPDATE,
        Permissions.MENU_READ,
        Permissions.TABLES_READ,
        Permissions.STATS_READ,
    },
    StaffRole.manager: set(Permissions),
    StaffRole.admin: set(Permissions),
}


class PermissionService:
    @staticmethod
    def get_staff_permissions(staff: Staff) -> Set[str]:
        """Get all permissions for a staff member based on their role."""
        return {permission.value for permission in ROLE_PERMISSIONS.get(staff.role, set())}

    @staticmethod
    def has_permission(staff: Staff, required_permission: str) -> bool:
        """Check if staff member has specific permission."""
        perms = PermissionService.get_staff_permissions(staff)
        return Permissions(required_permission).value in perms
