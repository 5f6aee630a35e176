"""routes/foods.py – food (menu item) CRUD.

POST/PUT take multipart form fields plus an optional `image` file.
DELETE answers 409 + requiresConfirmation when sales reference the food;
repeat with ?force=true to delete those sale lines as well.
"""
import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from ..core.errors import PosError
from ..deps import get_current_user, get_food_handler, get_foods
from ..models import ApiResponse, FoodOut, FoodWrite

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/foods", tags=["Foods"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=ApiResponse[list[FoodOut]])
async def list_foods(
    category_id: Optional[int] = Query(default=None),
    search:      Optional[str] = Query(default=None, description="Part of the food name"),
    status:      Optional[str] = Query(default=None, description="available | out_of_stock | inactive"),
):
    try:
        return ApiResponse(data=await get_foods().list_all(category_id, search, status))
    except PosError:
        raise
    except Exception:
        logger.exception("Get foods failed")
        raise HTTPException(status_code=500, detail="An error occurred while fetching foods")


@router.get("/{food_id}", response_model=ApiResponse[FoodOut])
async def get_food(food_id: int):
    try:
        return ApiResponse(data=await get_foods().get(food_id))
    except PosError:
        raise
    except Exception:
        logger.exception("Get food failed")
        raise HTTPException(status_code=500, detail="An error occurred while fetching food")


@router.post("", status_code=201, response_model=ApiResponse[FoodOut])
async def create_food(
    food_name:   str = Form(..., min_length=1),
    category_id: int = Form(...),
    price:       Decimal = Form(..., ge=0),
    stock:       int = Form(default=0, ge=0),
    description: Optional[str] = Form(default=None),
    status:      Optional[str] = Form(default=None),
    image:       Optional[UploadFile] = File(default=None),
):
    data = FoodWrite(food_name=food_name, category_id=category_id, price=price,
                     stock=stock, description=description, status=status)
    try:
        food = await get_food_handler().handle_create(data, image)
        return ApiResponse(message="Food created successfully", data=food)
    except PosError:
        raise
    except Exception:
        logger.exception("Create food failed")
        raise HTTPException(status_code=500, detail="An error occurred while creating food")


@router.put("/{food_id}", response_model=ApiResponse[FoodOut])
async def update_food(
    food_id:     int,
    food_name:   str = Form(..., min_length=1),
    category_id: int = Form(...),
    price:       Decimal = Form(..., ge=0),
    stock:       int = Form(default=0, ge=0),
    description: Optional[str] = Form(default=None),
    status:      Optional[str] = Form(default=None),
    image:       Optional[UploadFile] = File(default=None),
):
    data = FoodWrite(food_name=food_name, category_id=category_id, price=price,
                     stock=stock, description=description, status=status)
    try:
        food = await get_food_handler().handle_update(food_id, data, image)
        return ApiResponse(message="Food updated successfully", data=food)
    except PosError:
        raise
    except Exception:
        logger.exception("Update food failed")
        raise HTTPException(status_code=500, detail="An error occurred while updating food")


@router.delete("/{food_id}", response_model=ApiResponse[None])
async def delete_food(
    food_id: int,
    force:   bool = Query(default=False, description="Also delete sale lines referencing this food"),
):
    try:
        await get_food_handler().handle_delete(food_id, force)
        return ApiResponse(message="Food deleted successfully")
    except PosError:
        raise
    except Exception:
        logger.exception("Delete food failed")
        raise HTTPException(status_code=500, detail="An error occurred while deleting food")
