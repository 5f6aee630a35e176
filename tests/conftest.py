"""tests/conftest.py – shared fixtures: temp SQLite database, services, authenticated client."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from foodpos.core.auth import AuthService
from foodpos.core.categories import CategoryService
from foodpos.core.dashboard import DashboardService
from foodpos.core.foods import FoodService
from foodpos.core.storage import ImageStorage
from foodpos.core.transactions import TransactionService
from foodpos.db import session as sess_module
from foodpos.db.session import init_db
from foodpos.handlers.food_handler import FoodHandler
from foodpos.handlers.transaction_handler import TransactionHandler
from foodpos.models import CategoryIn, FoodWrite


# ── Global: reset engine cache between tests ───────────────────────────────────

@pytest.fixture(autouse=True)
def clear_engine_cache():
    sess_module._engines.clear()
    sess_module._session_factories.clear()
    yield
    for engine in sess_module._engines.values():
        engine.dispose()
    sess_module._engines.clear()
    sess_module._session_factories.clear()


# ── Services ───────────────────────────────────────────────────────────────────

class FixedClock:
    """Settable replacement for datetime.now."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@dataclass
class Services:
    url: str
    clock: FixedClock
    auth: AuthService
    categories: CategoryService
    foods: FoodService
    transactions: TransactionService
    dashboard: DashboardService
    storage: ImageStorage
    food_h: FoodHandler
    transaction_h: TransactionHandler


def build_services(url: str, upload_dir, clock: FixedClock, *, allow_delete=False, trust_client_totals=True,
                   tax_rate=Decimal("0")) -> Services:
    transactions = TransactionService(url, allow_delete=allow_delete, clock=clock)
    foods = FoodService(url)
    storage = ImageStorage(upload_dir)
    return Services(
        url=url,
        clock=clock,
        auth=AuthService(url, bcrypt_rounds=4),
        categories=CategoryService(url),
        foods=foods,
        transactions=transactions,
        dashboard=DashboardService(url, transactions, clock=clock),
        storage=storage,
        food_h=FoodHandler(foods, storage),
        transaction_h=TransactionHandler(transactions, tax_rate=tax_rate, trust_client_totals=trust_client_totals),
    )


@pytest.fixture
def db_url(tmp_path) -> str:
    url = f"sqlite:///{tmp_path / 'foodpos.db'}"
    init_db(url)
    return url


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 10, 16, 12, 0, 0))


@pytest.fixture
def services(db_url, tmp_path, clock) -> Services:
    svc = build_services(db_url, tmp_path / "uploads", clock)
    svc.auth.create_user("cashier", "cashier123", "Test Cashier", "cashier")
    return svc


@pytest.fixture
def category_id(services) -> int:
    cat = services.categories._do_create(CategoryIn(category_name="Main Course"))
    return cat.id


@pytest.fixture
def make_food(services, category_id):
    def _make(name="Fried Rice", price="8.99", stock=100):
        return services.foods._do_create(
            FoodWrite(food_name=name, category_id=category_id, price=Decimal(price), stock=stock), None
        )
    return _make


# ── HTTP ───────────────────────────────────────────────────────────────────────

def patch_deps(svc: Services):
    return (
        patch("foodpos.deps._auth", svc.auth),
        patch("foodpos.deps._categories", svc.categories),
        patch("foodpos.deps._foods", svc.foods),
        patch("foodpos.deps._transactions", svc.transactions),
        patch("foodpos.deps._dashboard", svc.dashboard),
        patch("foodpos.deps._storage", svc.storage),
        patch("foodpos.deps._food_h", svc.food_h),
        patch("foodpos.deps._transaction_h", svc.transaction_h),
    )


@pytest.fixture
def anon_client(services):
    patches = patch_deps(services)
    for p in patches:
        p.start()
    from foodpos.main import app
    yield TestClient(app)
    for p in reversed(patches):
        p.stop()


@pytest.fixture
def client(anon_client):
    r = anon_client.post("/api/login", json={"username": "cashier", "password": "cashier123"})
    assert r.status_code == 200, r.text
    anon_client.headers["Authorization"] = f"Bearer {r.json()['data']['token']}"
    return anon_client
