"""routes/dashboard.py – GET /dashboard/summary, GET /dashboard/top-foods"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.errors import PosError
from ..deps import get_current_user, get_dashboard
from ..models import ApiResponse, DashboardSummary, TopFood

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["Dashboard"], dependencies=[Depends(get_current_user)])


@router.get("/summary", response_model=ApiResponse[DashboardSummary])
async def summary():
    try:
        return ApiResponse(data=await get_dashboard().summary())
    except PosError:
        raise
    except Exception:
        logger.exception("Get dashboard failed")
        raise HTTPException(status_code=500, detail="An error occurred while fetching dashboard data")


@router.get("/top-foods", response_model=ApiResponse[list[TopFood]])
async def top_foods(limit: int = Query(default=10, ge=1, le=50)):
    try:
        return ApiResponse(data=await get_dashboard().top_foods(limit))
    except PosError:
        raise
    except Exception:
        logger.exception("Get top foods failed")
        raise HTTPException(status_code=500, detail="An error occurred while fetching top foods")
