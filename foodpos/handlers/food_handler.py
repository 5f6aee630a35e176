"""
handlers/food_handler.py – FoodHandler class.
Responsibility: tie FoodService writes to image files on disk.

Files are written before the DB write and removed again if it fails; old or
deleted images are removed only after the DB change committed.
"""
import logging
from typing import Optional

from fastapi import UploadFile

from ..core.foods import FoodService
from ..core.storage import ImageStorage
from ..models import FoodOut, FoodWrite

logger = logging.getLogger(__name__)


class FoodHandler:
    def __init__(self, foods: FoodService, storage: ImageStorage) -> None:
        self._foods = foods
        self._storage = storage

    async def handle_create(self, data: FoodWrite, image: Optional[UploadFile]) -> FoodOut:
        filename = self._store(image)
        try:
            return await self._foods.create(data, filename)
        except Exception:
            self._storage.remove(filename)
            raise

    async def handle_update(self, food_id: int, data: FoodWrite, image: Optional[UploadFile]) -> FoodOut:
        filename = self._store(image)
        try:
            food, replaced = await self._foods.update(food_id, data, filename)
        except Exception:
            self._storage.remove(filename)
            raise
        self._storage.remove(replaced)
        return food

    async def handle_delete(self, food_id: int, force: bool) -> None:
        image = await self._foods.delete(food_id, force=force)
        if image and not self._storage.remove(image):
            logger.info("Image %s of deleted food id=%d was not removed", image, food_id)

    def _store(self, image: Optional[UploadFile]) -> Optional[str]:
        if image is None or not image.filename:
            return None
        return self._storage.save(image.filename, image.file)
