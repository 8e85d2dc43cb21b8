from sqlmodel import select

from bistro.models import MenuItem, StaffRole, Table, TableStatus
from bistro.security import authenticate_staff
from bistro.seeds.demo import seed_demo_data
from bistro.stats_service import StatsService


def test_seed_is_idempotent(session, uow):
    first = seed_demo_data(session)
    second = seed_demo_data(session)

    assert first == {"staff": 1, "categories": 6, "items": 6, "tables": 15}
    assert second == {"staff": 0, "categories": 0, "items": 0, "tables": 0}

    admin = authenticate_staff(session, "admin", "admin123")
    assert admin.role == StaffRole.manager

    prices = {item.name: item.price_cents for item in session.exec(select(MenuItem)).all()}
    assert prices["Gourmet Beef Burger"] == 1650
    assert prices["Artisan Coffee"] == 450

    tables = session.exec(select(Table).order_by(Table.number)).all()
    assert [t.seats for t in tables] == [4] * 5 + [6] * 5 + [8] * 5
    assert (tables[6].x, tables[6].y) == (1, 1)
    assert sum(t.status == TableStatus.occupied for t in tables) == 8
    assert StatsService(uow).get_daily_stats().table_occupancy == 53
