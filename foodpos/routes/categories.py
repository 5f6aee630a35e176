"""routes/categories.py – category CRUD.

  GET    /categories        → all categories with food_count
  GET    /categories/{id}   → one category
  POST   /categories        → create (name must be unique)
  PUT    /categories/{id}   → update
  DELETE /categories/{id}   → delete, refused while foods use it
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core.errors import PosError
from ..deps import get_categories, get_current_user
from ..models import ApiResponse, CategoryIn, CategoryOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["Categories"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=ApiResponse[list[CategoryOut]])
async def list_categories():
    try:
        return ApiResponse(data=await get_categories().list_all())
    except PosError:
        raise
    except Exception:
        logger.exception("Get categories failed")
        raise HTTPException(status_code=500, detail="An error occurred while fetching categories")


@router.get("/{category_id}", response_model=ApiResponse[CategoryOut])
async def get_category(category_id: int):
    try:
        return ApiResponse(data=await get_categories().get(category_id))
    except PosError:
        raise
    except Exception:
        logger.exception("Get category failed")
        raise HTTPException(status_code=500, detail="An error occurred while fetching category")


@router.post("", status_code=201, response_model=ApiResponse[CategoryOut])
async def create_category(req: CategoryIn):
    try:
        data = await get_categories().create(req)
        return ApiResponse(message="Category created successfully", data=data)
    except PosError:
        raise
    except Exception:
        logger.exception("Create category failed")
        raise HTTPException(status_code=500, detail="An error occurred while creating category")


@router.put("/{category_id}", response_model=ApiResponse[CategoryOut])
async def update_category(category_id: int, req: CategoryIn):
    try:
        data = await get_categories().update(category_id, req)
        return ApiResponse(message="Category updated successfully", data=data)
    except PosError:
        raise
    except Exception:
        logger.exception("Update category failed")
        raise HTTPException(status_code=500, detail="An error occurred while updating category")


@router.delete("/{category_id}", response_model=ApiResponse[None])
async def delete_category(category_id: int):
    try:
        await get_categories().delete(category_id)
        return ApiResponse(message="Category deleted successfully")
    except PosError:
        raise
    except Exception:
        logger.exception("Delete category failed")
        raise HTTPException(status_code=500, detail="An error occurred while deleting category")
