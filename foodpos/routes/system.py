"""routes/system.py – GET /health"""
from datetime import datetime

from fastapi import APIRouter

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    return {"success": True, "message": "FoodPOS API is running", "time": datetime.now().isoformat()}
