"""
core/categories.py – CategoryService class.
Responsibility: category CRUD; deletion refused while foods reference it.
"""
import asyncio
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db.models import Category, Food
from ..db.session import db_session
from ..models import CategoryIn, CategoryOut
from .errors import BusinessRuleError, NotFoundError

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, database_url: str) -> None:
        self._url = database_url

    # ── Public ─────────────────────────────────────────────────────────────────

    async def list_all(self) -> list[CategoryOut]:
        """All categories with their food count, ordered by name."""
        return await asyncio.get_event_loop().run_in_executor(None, self._fetch_all)

    async def get(self, category_id: int) -> CategoryOut:
        return await asyncio.get_event_loop().run_in_executor(None, self._fetch_one, category_id)

    async def create(self, data: CategoryIn) -> CategoryOut:
        return await asyncio.get_event_loop().run_in_executor(None, self._do_create, data)

    async def update(self, category_id: int, data: CategoryIn) -> CategoryOut:
        return await asyncio.get_event_loop().run_in_executor(None, self._do_update, category_id, data)

    async def delete(self, category_id: int) -> None:
        await asyncio.get_event_loop().run_in_executor(None, self._do_delete, category_id)

    # ── Private ────────────────────────────────────────────────────────────────

    def _fetch_all(self) -> list[CategoryOut]:
        with db_session(self._url) as session:
            rows = session.execute(
                select(Category, func.count(Food.id).label("food_count"))
                .outerjoin(Food, Food.category_id == Category.id)
                .group_by(Category.id)
                .order_by(Category.category_name.asc())
            ).all()
            return [self._to_out(cat, count) for cat, count in rows]

    def _fetch_one(self, category_id: int) -> CategoryOut:
        with db_session(self._url) as session:
            cat = self._get_or_404(session, category_id)
            return self._to_out(cat, self._food_count(session, category_id))

    def _do_create(self, data: CategoryIn) -> CategoryOut:
        with db_session(self._url) as session:
            self._ensure_unique_name(session, data.category_name)
            cat = Category(category_name=data.category_name, description=data.description or None)
            session.add(cat)
            session.flush()
            logger.info("Category created: %s", cat.category_name)
            return self._to_out(cat, 0)

    def _do_update(self, category_id: int, data: CategoryIn) -> CategoryOut:
        with db_session(self._url) as session:
            cat = self._get_or_404(session, category_id)
            self._ensure_unique_name(session, data.category_name, exclude_id=category_id)
            cat.category_name = data.category_name
            cat.description = data.description or None
            session.flush()
            return self._to_out(cat, self._food_count(session, category_id))

    def _do_delete(self, category_id: int) -> None:
        with db_session(self._url) as session:
            cat = self._get_or_404(session, category_id)
            if self._food_count(session, category_id) > 0:
                raise BusinessRuleError("Cannot delete category. There are foods in this category.")
            session.delete(cat)
            logger.info("Category deleted: id=%d", category_id)

    # ── Helpers ────────────────────────────────────────────────────────────────

    @staticmethod
    def _get_or_404(session: Session, category_id: int) -> Category:
        cat = session.get(Category, category_id)
        if cat is None:
            raise NotFoundError("Category not found")
        return cat

    @staticmethod
    def _food_count(session: Session, category_id: int) -> int:
        return session.scalar(select(func.count(Food.id)).where(Food.category_id == category_id)) or 0

    @staticmethod
    def _ensure_unique_name(session: Session, name: str, exclude_id: Optional[int] = None) -> None:
        stmt = select(Category.id).where(Category.category_name == name)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        if session.scalar(stmt) is not None:
            raise BusinessRuleError("Category name already exists")

    @staticmethod
    def _to_out(cat: Category, food_count: int) -> CategoryOut:
        return CategoryOut(
            id=cat.id,
            category_name=cat.category_name,
            description=cat.description,
            food_count=food_count,
            created_at=cat.created_at,
            updated_at=cat.updated_at,
        )
