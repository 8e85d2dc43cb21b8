"""
Seed a demo restaurant: a manager login, a small menu and the floor plan.

Safe to run repeatedly; rows that already exist (matched by username,
category name, item name or table number) are left alone.

Usage:
    python -m bistro.seeds.demo
"""

import logging

from sqlmodel import Session, select

from ..db import create_db_and_tables, engine
from ..models import MenuCategory, MenuItem, Staff, StaffRole, Table, TableStatus
from ..pricing import to_cents
from ..security import get_password_hash

logger = logging.getLogger(__name__)


DEMO_MANAGER = {
    "username": "admin",
    "password": "admin123",
    "name": "Sarah Johnson",
    "role": StaffRole.manager,
}

DEMO_CATEGORIES = [
    {"name": "Popular", "icon": "fas fa-star", "order": 0},
    {"name": "Appetizers", "icon": "fas fa-bacon", "order": 1},
    {"name": "Main Courses", "icon": "fas fa-drumstick-bite", "order": 2},
    {"name": "Pizza", "icon": "fas fa-pizza-slice", "order": 3},
    {"name": "Beverages", "icon": "fas fa-glass-martini-alt", "order": 4},
    {"name": "Desserts", "icon": "fas fa-ice-cream", "order": 5},
]

_UNSPLASH = "https://images.unsplash.com/{}?ixlib=rb-4.0.3&auto=format&fit=crop&w=400&h=300"

DEMO_ITEMS = [
    {
        "category": "Popular",
        "name": "Gourmet Beef Burger",
        "description": "Angus beef patty with aged cheddar, lettuce, tomato",
        "price": "16.50",
        "image": _UNSPLASH.format("photo-1568901346375-23c9450c58cd"),
        "preparation_time": 15,
        "order": 0,
    },
    {
        "category": "Popular",
        "name": "Margherita Pizza",
        "description": "Fresh tomato sauce, mozzarella, basil leaves",
        "price": "18.00",
        "image": _UNSPLASH.format("photo-1574071318508-1cdbab80d002"),
        "preparation_time": 20,
        "order": 1,
    },
    {
        "category": "Appetizers",
        "name": "Caesar Salad",
        "description": "Crisp romaine, parmesan, croutons, caesar dressing",
        "price": "12.50",
        "image": _UNSPLASH.format("photo-1512621776951-a57141f2eefd"),
        "preparation_time": 10,
        "order": 0,
    },
    {
        "category": "Main Courses",
        "name": "Grilled Salmon",
        "description": "Atlantic salmon with herbs and lemon butter",
        "price": "24.00",
        "image": _UNSPLASH.format("photo-1467003909585-2f8a72700288"),
        "preparation_time": 25,
        "order": 0,
    },
    {
        "category": "Desserts",
        "name": "Chocolate Lava Cake",
        "description": "Warm chocolate cake with molten center, vanilla ice cream",
        "price": "9.50",
        "image": _UNSPLASH.format("photo-1551024506-0bccd828d307"),
        "preparation_time": 12,
        "order": 0,
    },
    {
        "category": "Beverages",
        "name": "Artisan Coffee",
        "description": "Premium espresso blend with steamed milk",
        "price": "4.50",
        "image": _UNSPLASH.format("photo-1544145945-f90425340c7e"),
        "preparation_time": 5,
        "order": 0,
    },
]

TABLE_COUNT = 15
GRID_WIDTH = 5


def _demo_table(number: int) -> Table:
    if number <= 5:
        seats = 4
    elif number <= 10:
        seats = 6
    else:
        seats = 8
    # Busy-evening snapshot for the dashboard
    if number <= 8:
        status = TableStatus.occupied
    elif number <= 12:
        status = TableStatus.available
    else:
        status = TableStatus.reserved
    return Table(
        number=number,
        seats=seats,
        status=status,
        x=(number - 1) % GRID_WIDTH,
        y=(number - 1) // GRID_WIDTH,
    )


def seed_demo_data(session: Session) -> dict[str, int]:
    """Insert the demo rows that are missing. Returns counts of created rows."""
    created = {"staff": 0, "categories": 0, "items": 0, "tables": 0}

    manager = session.exec(
        select(Staff).where(Staff.username == DEMO_MANAGER["username"])
    ).first()
    if not manager:
        session.add(
            Staff(
                username=DEMO_MANAGER["username"],
                hashed_password=get_password_hash(DEMO_MANAGER["password"]),
                name=DEMO_MANAGER["name"],
                role=DEMO_MANAGER["role"],
            )
        )
        created["staff"] += 1

    categories: dict[str, MenuCategory] = {
        category.name: category for category in session.exec(select(MenuCategory)).all()
    }
    for category_data in DEMO_CATEGORIES:
        if category_data["name"] not in categories:
            category = MenuCategory(**category_data)
            session.add(category)
            categories[category.name] = category
            created["categories"] += 1
    session.flush()

    existing_items = set(session.exec(select(MenuItem.name)).all())
    for item_data in DEMO_ITEMS:
        if item_data["name"] in existing_items:
            continue
        item_data = dict(item_data)
        category = categories[item_data.pop("category")]
        price = item_data.pop("price")
        session.add(MenuItem(category_id=category.id, price_cents=to_cents(price), **item_data))
        created["items"] += 1

    existing_numbers = set(session.exec(select(Table.number)).all())
    for number in range(1, TABLE_COUNT + 1):
        if number not in existing_numbers:
            session.add(_demo_table(number))
            created["tables"] += 1

    session.commit()
    if any(created.values()):
        logger.info(f"Demo data seeded: {created}")
    return created


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    create_db_and_tables()
    with Session(engine) as session:
        result = seed_demo_data(session)
    print("Seeding complete!")
    for kind, count in result.items():
        print(f"  {kind.capitalize()} created: {count}")
