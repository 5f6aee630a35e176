"""
core/dashboard.py – DashboardService class.
Read-only sales aggregates: today's counters, top foods, weekly sales,
per-category totals. Only `completed` transactions are counted.
"""
import asyncio
import logging
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Callable

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from ..db.models import Category, Food, Transaction, TransactionDetail
from ..db.session import db_session
from ..models import CategoryStat, DailySales, DashboardSummary, SummaryCounters, TopFood
from .transactions import TransactionService

logger = logging.getLogger(__name__)

COMPLETED = "completed"


class DashboardService:
    def __init__(
        self,
        database_url: str,
        transactions: TransactionService,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._url = database_url
        self._transactions = transactions
        self._clock = clock

    # ── Public ─────────────────────────────────────────────────────────────────

    async def summary(self) -> DashboardSummary:
        recent, _ = await self._transactions.list_page(page=1, limit=5)
        data = await asyncio.get_event_loop().run_in_executor(None, self._fetch_summary)
        return DashboardSummary(recent_transactions=recent, **data)

    async def top_foods(self, limit: int = 10) -> list[TopFood]:
        return await asyncio.get_event_loop().run_in_executor(None, self._fetch_top_foods, limit)

    # ── Private ────────────────────────────────────────────────────────────────

    def _fetch_summary(self) -> dict:
        today = self._clock().date()
        day_start = datetime.combine(today, time.min)
        day_end = day_start + timedelta(days=1)
        today_filter = and_(
            Transaction.status == COMPLETED,
            Transaction.transaction_date >= day_start,
            Transaction.transaction_date < day_end,
        )

        with db_session(self._url) as session:
            count, revenue = session.execute(
                select(func.count(Transaction.id), func.coalesce(func.sum(Transaction.total_payment), 0))
                .where(today_filter)
            ).one()
            items_sold = session.scalar(
                select(func.coalesce(func.sum(TransactionDetail.quantity), 0))
                .join(Transaction, TransactionDetail.transaction_id == Transaction.id)
                .where(today_filter)
            )
            counters = SummaryCounters(
                today_revenue=Decimal(str(revenue or 0)),
                today_transactions=count or 0,
                today_items_sold=items_sold or 0,
                total_foods=session.scalar(select(func.count(Food.id))) or 0,
                total_categories=session.scalar(select(func.count(Category.id))) or 0,
            )
            return {
                "summary": counters,
                "popular_foods": self._top_foods(session, 5),
                "weekly_sales": self._weekly_sales(session, today),
                "category_stats": self._category_stats(session),
            }

    def _fetch_top_foods(self, limit: int) -> list[TopFood]:
        with db_session(self._url) as session:
            return self._top_foods(session, limit)

    @staticmethod
    def _sold_lines():
        """transaction_details restricted to completed transactions."""
        return (
            select(TransactionDetail.food_id, TransactionDetail.quantity)
            .join(Transaction, TransactionDetail.transaction_id == Transaction.id)
            .where(Transaction.status == COMPLETED)
            .subquery()
        )

    def _top_foods(self, session: Session, limit: int) -> list[TopFood]:
        sold = self._sold_lines()
        qty = func.coalesce(func.sum(sold.c.quantity), 0).label("quantity_sold")
        rows = session.execute(
            select(Food.id, Food.food_name, Food.image, Category.category_name, qty)
            .outerjoin(Category, Food.category_id == Category.id)
            .outerjoin(sold, sold.c.food_id == Food.id)
            .group_by(Food.id, Food.food_name, Food.image, Category.category_name)
            .order_by(qty.desc(), Food.food_name.asc())
            .limit(limit)
        ).all()
        return [
            TopFood(id=r.id, food_name=r.food_name, image=r.image,
                    category_name=r.category_name, quantity_sold=r.quantity_sold or 0)
            for r in rows
        ]

    @staticmethod
    def _weekly_sales(session: Session, today) -> list[DailySales]:
        """Last 7 days including today, grouped per calendar day."""
        since = datetime.combine(today - timedelta(days=6), time.min)
        rows = session.execute(
            select(Transaction.transaction_date, Transaction.total_payment)
            .where(Transaction.status == COMPLETED, Transaction.transaction_date >= since)
        ).all()

        buckets: dict[str, list] = {}
        for when, amount in rows:
            day = buckets.setdefault(when.date().isoformat(), [0, Decimal("0")])
            day[0] += 1
            day[1] += amount or Decimal("0")
        return [
            DailySales(date=day, total_transactions=n, total_revenue=revenue)
            for day, (n, revenue) in sorted(buckets.items())
        ]

    def _category_stats(self, session: Session) -> list[CategoryStat]:
        sold = self._sold_lines()
        total_sold = func.coalesce(func.sum(sold.c.quantity), 0).label("total_sold")
        rows = session.execute(
            select(
                Category.category_name,
                func.count(func.distinct(Food.id)).label("total_foods"),
                total_sold,
            )
            .outerjoin(Food, Food.category_id == Category.id)
            .outerjoin(sold, sold.c.food_id == Food.id)
            .group_by(Category.id, Category.category_name)
            .order_by(total_sold.desc(), Category.category_name.asc())
        ).all()
        return [
            CategoryStat(category_name=r.category_name, total_foods=r.total_foods or 0, total_sold=r.total_sold or 0)
            for r in rows
        ]
