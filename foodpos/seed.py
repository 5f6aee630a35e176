"""
seed.py – Create the schema and load demo data.

    foodpos-seed
    python -m foodpos.seed

Safe to run repeatedly: existing users, categories and foods (matched by
name) are left alone.
"""
import asyncio
import logging
from decimal import Decimal

from .config import Settings
from .core.auth import AuthService
from .core.categories import CategoryService
from .core.foods import FoodService
from .db.session import init_db
from .models import CategoryIn, FoodWrite

logger = logging.getLogger(__name__)

USERS = [
    ("admin",   "admin123",   "Administrator", "admin"),
    ("cashier", "cashier123", "Cashier",       "cashier"),
]

CATEGORIES = [
    ("Main Course", "Main dishes"),
    ("Beverages",   "Drinks and beverages"),
    ("Desserts",    "Sweet desserts"),
    ("Snacks",      "Light snacks"),
    ("Fast Food",   "Quick meals"),
]

# (name, category, price, stock, description)
FOODS = [
    ("Fried Rice",     "Main Course", "8.99",  100, "Special fried rice with egg"),
    ("Chicken Satay",  "Main Course", "10.99", 50,  "Grilled chicken skewers with peanut sauce"),
    ("Iced Tea",       "Beverages",   "2.49",  200, "Fresh iced tea"),
    ("Orange Juice",   "Beverages",   "3.99",  150, "Freshly squeezed orange juice"),
    ("Chocolate Cake", "Desserts",    "6.99",  30,  "Rich chocolate cake"),
    ("Ice Cream",      "Desserts",    "4.99",  80,  "Vanilla ice cream"),
    ("French Fries",   "Snacks",      "4.99",  100, "Crispy french fries"),
    ("Chicken Wings",  "Snacks",      "8.99",  60,  "Spicy chicken wings"),
    ("Burger",         "Fast Food",   "12.99", 40,  "Beef burger with cheese"),
    ("Pizza",          "Fast Food",   "15.99", 25,  "Margherita pizza"),
]


async def seed(settings: Settings) -> dict:
    """Load demo data into `settings.database_url`. Returns counts of rows created."""
    url = settings.database_url
    init_db(url)
    created = {"users": 0, "categories": 0, "foods": 0}

    auth = AuthService(url, token_ttl_hours=settings.token_ttl_hours, bcrypt_rounds=settings.bcrypt_rounds)
    for username, password, full_name, role in USERS:
        if auth.create_user(username, password, full_name, role) is not None:
            created["users"] += 1

    categories = CategoryService(url)
    by_name = {c.category_name: c.id for c in await categories.list_all()}
    for name, description in CATEGORIES:
        if name not in by_name:
            cat = await categories.create(CategoryIn(category_name=name, description=description))
            by_name[name] = cat.id
            created["categories"] += 1

    foods = FoodService(url)
    existing = {f.food_name for f in await foods.list_all()}
    for name, category, price, stock, description in FOODS:
        if name in existing:
            continue
        food = await foods.create(FoodWrite(
            food_name=name,
            category_id=by_name[category],
            price=Decimal(price),
            stock=stock,
            description=description,
        ))
        logger.info("Seeded %s %s", food.food_code, food.food_name)
        created["foods"] += 1

    return created


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    created = asyncio.run(seed(settings))
    logger.info(
        "Seed done: %d users, %d categories, %d foods created",
        created["users"], created["categories"], created["foods"],
    )


if __name__ == "__main__":
    main()
