"""
Dashboard statistics, recomputed from current store contents on every call.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from .models import TableStatus, local_now
from .unit_of_work import UnitOfWork


@dataclass(frozen=True)
class DailyStats:
    daily_sales_cents: int
    active_orders: int
    table_occupancy: int  # whole percent
    staff_online: int


def occupancy_percent(occupied: int, total: int) -> int:
    """round(100 * occupied / total), halves rounded up; 0 when there are no tables."""
    if total <= 0:
        return 0
    ratio = Decimal(100 * occupied) / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class StatsService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def get_daily_stats(self, now: datetime | None = None) -> DailyStats:
        """
        Daily sales cover paid orders created since local midnight; every
        other figure is system-wide.

        staff_online counts active staff accounts; there is no session or
        presence tracking behind it.
        """
        now = now or local_now()
        day_start = datetime.combine(now.date(), time.min)
        day_end = day_start + timedelta(days=1)

        total_tables = self.uow.tables.count()
        occupied_tables = self.uow.tables.count_by_status(TableStatus.occupied)

        return DailyStats(
            daily_sales_cents=self.uow.orders.paid_total_between(day_start, day_end),
            active_orders=self.uow.orders.count_active(),
            table_occupancy=occupancy_percent(occupied_tables, total_tables),
            staff_online=self.uow.staff.count_active(),
        )
