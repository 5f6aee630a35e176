"""
tests/test_codes.py – sequential code generation.
Scenarios: formatting, first code, collisions, per-day reset, concurrent creates.
"""
import asyncio
import re
from datetime import date, datetime
from decimal import Decimal

import pytest

from foodpos.core import codes
from foodpos.core.codes import format_code, parse_number, transaction_prefix
from foodpos.core.errors import ConflictError
from foodpos.models import FoodWrite, SaleItemIn, SaleTotals


def _totals(amount: str) -> SaleTotals:
    value = Decimal(amount)
    return SaleTotals(total_item=1, subtotal=value, tax=Decimal("0"), discount=Decimal("0"),
                      total_payment=value, money_received=value, change_money=Decimal("0"))


class TestFormatting:
    def test_format_pads_to_four(self):
        assert format_code("MKN", 1) == "MKN0001"
        assert format_code("MKN", 12345) == "MKN12345"

    def test_transaction_prefix_has_day(self):
        assert transaction_prefix(date(2026, 10, 16)) == "TRX20261016"

    @pytest.mark.parametrize("code,expected", [
        ("MKN0042", 42),
        ("MKN", 0),
        (None, 0),
        ("XYZ0001", 0),
        ("MKNabcd", 0),
    ])
    def test_parse_number(self, code, expected):
        assert parse_number(code, "MKN") == expected


class TestFoodCodes:
    def test_first_food_is_mkn0001(self, make_food):
        assert make_food().food_code == "MKN0001"
        assert make_food("Burger").food_code == "MKN0002"

    def test_codes_sort_past_9999(self, services, make_food):
        from foodpos.db.models import Food
        from foodpos.db.session import db_session

        first = make_food()
        with db_session(services.url) as session:
            session.get(Food, first.id).food_code = "MKN9999"
        assert make_food("Burger").food_code == "MKN10000"
        assert make_food("Pizza").food_code == "MKN10001"

    @pytest.mark.asyncio
    async def test_concurrent_creates_get_distinct_contiguous_codes(self, services, category_id):
        data = [
            FoodWrite(food_name=f"Food {i}", category_id=category_id, price=Decimal("1.00"), stock=1)
            for i in range(8)
        ]
        created = await asyncio.gather(*(services.foods.create(d) for d in data))
        codes = sorted(f.food_code for f in created)
        assert codes == [f"MKN{n:04d}" for n in range(1, 9)]


class TestCollisions:
    def test_taken_code_is_skipped(self, monkeypatch, make_food):
        make_food()
        monkeypatch.setattr(codes, "next_number", lambda *args: 1)
        assert make_food("Burger").food_code == "MKN0002"

    def test_gives_up_after_max_attempts(self, monkeypatch, make_food):
        for i in range(codes.MAX_ATTEMPTS):
            make_food(f"Food {i}")
        monkeypatch.setattr(codes, "next_number", lambda *args: 1)
        with pytest.raises(ConflictError) as exc:
            make_food("One Too Many")
        assert exc.value.status_code == 409


class TestTransactionCodes:
    @pytest.mark.asyncio
    async def test_increments_within_day_and_resets_next_day(self, services, make_food, clock):
        food = make_food(stock=10)
        item = [SaleItemIn(food_id=food.id, quantity=1, unit_price=Decimal("8.99"))]

        first = await services.transactions.create(item, _totals("8.99"), "cash")
        second = await services.transactions.create(item, _totals("8.99"), "cash")
        clock.now = datetime(2026, 10, 17, 9, 30)
        third = await services.transactions.create(item, _totals("8.99"), "cash")

        assert first.transaction_code == "TRX202610160001"
        assert second.transaction_code == "TRX202610160002"
        assert third.transaction_code == "TRX202610170001"
        assert re.fullmatch(r"TRX\d{8}\d{4}", third.transaction_code)
