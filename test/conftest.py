"""Shared fixtures: an in-memory database per test and an authenticated API client."""
import os

# Settings are read at import time; keep tests off any real database.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ.setdefault("SECRET_KEY", "x" * 32)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from bistro.db import build_engine, create_db_and_tables, get_session
from bistro.main import app
from bistro.models import MenuCategory, MenuItem, Staff, StaffRole, Table
from bistro.security import create_access_token, get_password_hash
from bistro.unit_of_work import UnitOfWork

STAFF_PASSWORD = "secret123"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def uow(session):
    return UnitOfWork(session)


def make_staff(session: Session, username: str, role: StaffRole = StaffRole.server, is_active: bool = True) -> Staff:
    staff = Staff(
        username=username,
        hashed_password=get_password_hash(STAFF_PASSWORD),
        name=username.title(),
        role=role,
        is_active=is_active,
    )
    session.add(staff)
    session.commit()
    session.refresh(staff)
    return staff


@pytest.fixture
def manager(session):
    return make_staff(session, "manager", role=StaffRole.manager)


@pytest.fixture
def menu(session) -> dict[str, MenuItem]:
    """A small menu keyed by short name: burger 16.50, salad 12.50, coffee 4.50, soup (unavailable)."""
    mains = MenuCategory(name="Main Courses", icon="fas fa-drumstick-bite", order=0)
    drinks = MenuCategory(name="Beverages", icon="fas fa-glass-martini-alt", order=1)
    session.add(mains)
    session.add(drinks)
    session.flush()

    items = {
        "burger": MenuItem(category_id=mains.id, name="Gourmet Beef Burger", price_cents=1650, order=0),
        "salad": MenuItem(category_id=mains.id, name="Caesar Salad", price_cents=1250, order=1),
        "coffee": MenuItem(category_id=drinks.id, name="Artisan Coffee", price_cents=450, order=0),
        "soup": MenuItem(category_id=mains.id, name="Soup of the Day", price_cents=800, is_available=False, order=2),
    }
    for item in items.values():
        session.add(item)
    session.commit()
    for item in items.values():
        session.refresh(item)
    return items


@pytest.fixture
def table(session) -> Table:
    table = Table(number=1, seats=4)
    session.add(table)
    session.commit()
    session.refresh(table)
    return table


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as request_session:
            yield request_session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(staff: Staff) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': staff.id})}"}


@pytest.fixture
def manager_client(client, manager):
    client.headers.update(auth_headers(manager))
    return client
