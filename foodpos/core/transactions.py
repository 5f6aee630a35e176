"""
core/transactions.py – TransactionService class.
Responsibility: record a sale atomically, list/read sales, optional delete.

A sale is one database transaction:
  code (TRX<YYYYMMDD>####) → header insert → per line conditional stock
  decrement + detail insert. Any failure rolls back everything.
Totals arrive precomputed (handlers/transaction_handler.py).
"""
import asyncio
import logging
import math
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, joinedload, selectinload

from ..db.models import Food, Transaction, TransactionDetail, User
from ..db.session import db_session
from ..models import (
    Pagination,
    SaleItemIn,
    SaleTotals,
    TransactionDetailOut,
    TransactionLineOut,
    TransactionOut,
)
from .codes import insert_with_code, transaction_prefix
from .errors import BusinessRuleError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


class TransactionService:
    """Sales persistence. Stock only changes through this class."""

    def __init__(
        self,
        database_url: str,
        allow_delete: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._url = database_url
        self._allow_delete = allow_delete
        self._clock = clock

    # ── Public: write ──────────────────────────────────────────────────────────

    async def create(
        self,
        items: list[SaleItemIn],
        totals: SaleTotals,
        payment_method: str,
        user_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> TransactionDetailOut:
        return await asyncio.get_event_loop().run_in_executor(
            None, self._do_create, items, totals, payment_method, user_id, notes
        )

    async def delete(self, transaction_id: int) -> None:
        """Delete a sale and put its quantities back in stock (if enabled)."""
        await asyncio.get_event_loop().run_in_executor(None, self._do_delete, transaction_id)

    # ── Public: read ───────────────────────────────────────────────────────────

    async def get(self, transaction_id: int) -> TransactionDetailOut:
        return await asyncio.get_event_loop().run_in_executor(None, self._fetch_one, transaction_id)

    async def list_page(
        self,
        page: int = 1,
        limit: int = 10,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        search: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> tuple[list[TransactionOut], Pagination]:
        """Newest first, filtered on calendar dates (inclusive)."""
        return await asyncio.get_event_loop().run_in_executor(
            None, self._fetch_page, page, limit, start_date, end_date, search, payment_method
        )

    # ── Private: create ────────────────────────────────────────────────────────

    def _do_create(
        self,
        items: list[SaleItemIn],
        totals: SaleTotals,
        payment_method: str,
        user_id: Optional[int],
        notes: Optional[str],
    ) -> TransactionDetailOut:
        if not items:
            raise InvalidInputError("Transaction items are required")

        now = self._clock()
        with db_session(self._url) as session:
            food_ids = {item.food_id for item in items}
            foods = {f.id: f for f in session.scalars(select(Food).where(Food.id.in_(food_ids)))}
            missing = sorted(food_ids - foods.keys())
            if missing:
                raise InvalidInputError(f"Food not found: {', '.join(map(str, missing))}")

            header = Transaction(
                transaction_date=now,
                user_id=user_id,
                total_item=totals.total_item,
                subtotal=totals.subtotal,
                tax=totals.tax,
                discount=totals.discount,
                total_payment=totals.total_payment,
                money_received=totals.money_received,
                change_money=totals.change_money,
                payment_method=payment_method,
                notes=notes or None,
                status="completed",
            )
            code = insert_with_code(session, header, Transaction.transaction_code, transaction_prefix(now.date()))

            for item in items:
                food = foods[item.food_id]
                self._take_stock(session, food, item.quantity)
                session.add(TransactionDetail(
                    transaction_id=header.id,
                    food_id=food.id,
                    food_name=food.food_name,
                    unit_price=item.unit_price,
                    quantity=item.quantity,
                    subtotal=item.unit_price * item.quantity,
                    notes=item.notes or None,
                ))
            session.flush()
            logger.info("Transaction %s created: %d lines, total %s", code, len(items), totals.total_payment)
            return self._load_detail(session, header.id)

    @staticmethod
    def _take_stock(session: Session, food: Food, quantity: int) -> None:
        """stock -= quantity only while it stays >= 0; zero rows → abort the sale."""
        result = session.execute(
            update(Food)
            .where(Food.id == food.id, Food.stock >= quantity)
            .values(stock=Food.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise BusinessRuleError(f"Insufficient stock for {food.food_name}")

    # ── Private: delete ────────────────────────────────────────────────────────

    def _do_delete(self, transaction_id: int) -> None:
        with db_session(self._url) as session:
            trx = session.get(Transaction, transaction_id, options=[selectinload(Transaction.details)])
            if trx is None:
                raise NotFoundError("Transaction not found")
            if not self._allow_delete:
                raise BusinessRuleError("Transaction deletion is not allowed for data integrity")

            for line in trx.details:
                session.execute(
                    update(Food)
                    .where(Food.id == line.food_id)
                    .values(stock=Food.stock + line.quantity)
                    .execution_options(synchronize_session=False)
                )
            session.delete(trx)
            logger.warning("Transaction %s deleted, stock restored for %d lines",
                           trx.transaction_code, len(trx.details))

    # ── Private: read ──────────────────────────────────────────────────────────

    def _fetch_one(self, transaction_id: int) -> TransactionDetailOut:
        with db_session(self._url) as session:
            return self._load_detail(session, transaction_id)

    def _fetch_page(
        self,
        page: int,
        limit: int,
        start_date: Optional[date],
        end_date: Optional[date],
        search: Optional[str],
        payment_method: Optional[str],
    ) -> tuple[list[TransactionOut], Pagination]:
        page = max(page, 1)
        limit = max(limit, 1)
        conditions = []
        if search:
            conditions.append(Transaction.transaction_code.icontains(search, autoescape=True))
        if payment_method:
            conditions.append(Transaction.payment_method == payment_method)
        if start_date:
            conditions.append(Transaction.transaction_date >= datetime.combine(start_date, time.min))
        if end_date:
            conditions.append(Transaction.transaction_date < datetime.combine(end_date + timedelta(days=1), time.min))

        line_count = (
            select(func.count(TransactionDetail.id))
            .where(TransactionDetail.transaction_id == Transaction.id)
            .correlate(Transaction)
            .scalar_subquery()
        )
        with db_session(self._url) as session:
            total = session.scalar(select(func.count(Transaction.id)).where(*conditions)) or 0
            rows = session.execute(
                select(Transaction, User.full_name, line_count)
                .outerjoin(User, Transaction.user_id == User.id)
                .where(*conditions)
                .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
                .limit(limit)
                .offset((page - 1) * limit)
            ).all()
            items = [self._orm_to_out(trx, cashier, count) for trx, cashier, count in rows]

        pagination = Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))
        return items, pagination

    def _load_detail(self, session: Session, transaction_id: int) -> TransactionDetailOut:
        trx = session.get(
            Transaction,
            transaction_id,
            options=[
                joinedload(Transaction.user),
                selectinload(Transaction.details).joinedload(TransactionDetail.food),
            ],
            populate_existing=True,
        )
        if trx is None:
            raise NotFoundError("Transaction not found")
        header = self._orm_to_out(trx, trx.user.full_name if trx.user else None, len(trx.details))
        lines = [
            TransactionLineOut(
                id=d.id,
                food_id=d.food_id,
                food_code=d.food.food_code if d.food else None,
                food_name=d.food_name,
                unit_price=d.unit_price,
                quantity=d.quantity,
                subtotal=d.subtotal,
                notes=d.notes,
            )
            for d in trx.details
        ]
        return TransactionDetailOut(**header.model_dump(), items=lines)

    # ── Converters ─────────────────────────────────────────────────────────────

    @staticmethod
    def _orm_to_out(trx: Transaction, cashier: Optional[str], item_count: int) -> TransactionOut:
        return TransactionOut(
            id=trx.id,
            transaction_code=trx.transaction_code,
            transaction_date=trx.transaction_date,
            user_id=trx.user_id,
            cashier=cashier,
            total_item=trx.total_item,
            subtotal=trx.subtotal,
            tax=trx.tax,
            discount=trx.discount,
            total_payment=trx.total_payment,
            money_received=trx.money_received,
            change_money=trx.change_money,
            payment_method=trx.payment_method,
            notes=trx.notes,
            status=trx.status,
            item_count=item_count or 0,
        )
