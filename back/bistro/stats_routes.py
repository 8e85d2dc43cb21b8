from typing import Annotated

from fastapi import APIRouter, Depends

from .models import Staff
from .permissions import Permissions
from .pricing import format_cents
from .schemas import DailyStatsRead
from .security import PermissionChecker
from .stats_service import StatsService
from .unit_of_work import UnitOfWork, get_uow

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("/daily", response_model=DailyStatsRead)
def daily_stats(
    current_staff: Annotated[Staff, Depends(PermissionChecker(Permissions.STATS_READ))],
    uow: UnitOfWork = Depends(get_uow),
):
    stats = StatsService(uow).get_daily_stats()
    return DailyStatsRead(
        daily_sales=format_cents(stats.daily_sales_cents),
        active_orders=stats.active_orders,
        table_occupancy=stats.table_occupancy,
        staff_online=stats.staff_online,
    )
