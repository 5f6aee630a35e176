"""
core/foods.py – FoodService class.
Responsibility: menu item CRUD, MKN#### code assignment, reference-aware delete.

Image files are not touched here; callers receive the stored filename and
deal with the file system (see handlers/food_handler.py).
"""
import asyncio
import logging
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, joinedload

from ..db.models import FOOD_STATUSES, Category, Food, Transaction, TransactionDetail
from ..db.session import db_session
from ..models import FoodOut, FoodWrite
from .codes import food_prefix, insert_with_code
from .errors import ConfirmationRequiredError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

IMAGE_URL_PREFIX = "/uploads"


class FoodService:
    """Foods table access. Codes come from core/codes.py."""

    def __init__(self, database_url: str) -> None:
        self._url = database_url

    # ── Public ─────────────────────────────────────────────────────────────────

    async def list_all(
        self,
        category_id: Optional[int] = None,
        search: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[FoodOut]:
        return await asyncio.get_event_loop().run_in_executor(
            None, self._fetch_all, category_id, search, status
        )

    async def get(self, food_id: int) -> FoodOut:
        return await asyncio.get_event_loop().run_in_executor(None, self._fetch_one, food_id)

    async def create(self, data: FoodWrite, image: Optional[str] = None) -> FoodOut:
        """Insert a food with the next MKN code."""
        return await asyncio.get_event_loop().run_in_executor(None, self._do_create, data, image)

    async def update(self, food_id: int, data: FoodWrite, image: Optional[str] = None) -> tuple[FoodOut, Optional[str]]:
        """Returns (updated food, replaced image filename or None)."""
        return await asyncio.get_event_loop().run_in_executor(None, self._do_update, food_id, data, image)

    async def delete(self, food_id: int, force: bool = False) -> Optional[str]:
        """Delete a food; returns its image filename so the caller can remove the file.

        Raises ConfirmationRequiredError when transaction lines reference the
        food and `force` is not set. With `force`, those lines are deleted in
        the same database transaction; transaction headers are kept.
        """
        return await asyncio.get_event_loop().run_in_executor(None, self._do_delete, food_id, force)

    # ── Private: reads ─────────────────────────────────────────────────────────

    def _fetch_all(self, category_id: Optional[int], search: Optional[str], status: Optional[str]) -> list[FoodOut]:
        with db_session(self._url) as session:
            q = select(Food).options(joinedload(Food.category))
            if category_id:
                q = q.where(Food.category_id == category_id)
            if search:
                q = q.where(Food.food_name.icontains(search, autoescape=True))
            if status:
                q = q.where(Food.status == status)
            rows = session.scalars(q.order_by(Food.food_name.asc())).all()
            return [self._orm_to_out(r) for r in rows]

    def _fetch_one(self, food_id: int) -> FoodOut:
        with db_session(self._url) as session:
            return self._orm_to_out(self._get_or_404(session, food_id))

    # ── Private: writes ────────────────────────────────────────────────────────

    def _do_create(self, data: FoodWrite, image: Optional[str]) -> FoodOut:
        with db_session(self._url) as session:
            self._ensure_category(session, data.category_id)
            food = Food(
                food_name=data.food_name,
                category_id=data.category_id,
                description=data.description or None,
                price=data.price,
                stock=data.stock or 0,
                image=image,
                status=data.status if data.status in FOOD_STATUSES else "available",
            )
            code = insert_with_code(session, food, Food.food_code, food_prefix())
            logger.info("Food created: %s (%s)", code, food.food_name)
            session.refresh(food, ["category"])
            return self._orm_to_out(food)

    def _do_update(self, food_id: int, data: FoodWrite, image: Optional[str]) -> tuple[FoodOut, Optional[str]]:
        with db_session(self._url) as session:
            food = self._get_or_404(session, food_id)
            self._ensure_category(session, data.category_id)

            replaced = None
            if image is not None:
                replaced, food.image = food.image, image

            food.food_name = data.food_name
            food.category_id = data.category_id
            food.price = data.price
            food.stock = data.stock or 0
            food.description = data.description or None
            if data.status in FOOD_STATUSES:
                food.status = data.status
            session.flush()
            session.refresh(food, ["category"])
            return self._orm_to_out(food), replaced

    def _do_delete(self, food_id: int, force: bool) -> Optional[str]:
        with db_session(self._url) as session:
            food = self._get_or_404(session, food_id)
            count, first, last = session.execute(
                select(
                    func.count(TransactionDetail.id),
                    func.min(Transaction.transaction_date),
                    func.max(Transaction.transaction_date),
                )
                .join(Transaction, TransactionDetail.transaction_id == Transaction.id)
                .where(TransactionDetail.food_id == food_id)
            ).one()

            if count and not force:
                raise ConfirmationRequiredError(
                    "This food has been used in transactions. Are you sure you want to delete it?",
                    transaction_count=count,
                    first_transaction_date=first.isoformat() if first else None,
                    last_transaction_date=last.isoformat() if last else None,
                )

            if count:
                session.execute(delete(TransactionDetail).where(TransactionDetail.food_id == food_id))
                logger.warning("Force delete food id=%d: removed %d transaction lines", food_id, count)

            image = food.image
            session.delete(food)
            logger.info("Food deleted: id=%d", food_id)
            return image

    # ── Helpers ────────────────────────────────────────────────────────────────

    @staticmethod
    def _get_or_404(session: Session, food_id: int) -> Food:
        food = session.get(Food, food_id, options=[joinedload(Food.category)])
        if food is None:
            raise NotFoundError("Food not found")
        return food

    @staticmethod
    def _ensure_category(session: Session, category_id: int) -> None:
        if session.get(Category, category_id) is None:
            raise InvalidInputError("Category not found")

    @staticmethod
    def _orm_to_out(food: Food) -> FoodOut:
        return FoodOut(
            id=food.id,
            food_code=food.food_code,
            food_name=food.food_name,
            category_id=food.category_id,
            category_name=food.category.category_name if food.category else None,
            description=food.description,
            price=food.price,
            stock=food.stock,
            image=food.image,
            image_url=f"{IMAGE_URL_PREFIX}/{food.image}" if food.image else None,
            status=food.status,
            created_at=food.created_at,
            updated_at=food.updated_at,
        )
