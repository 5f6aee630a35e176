"""routes/transactions.py – sales.

  POST   /transactions           → record a sale (201)
  GET    /transactions           → paginated list
  GET    /transactions/history   → same filters, single page
  GET    /transactions/{id}      → header + lines
  DELETE /transactions/{id}      → refused unless ALLOW_TRANSACTION_DELETE
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.errors import PosError
from ..deps import CurrentUser, get_current_user, get_transaction_handler, get_transactions
from ..models import ApiResponse, PaymentMethod, TransactionCreate, TransactionDetailOut, TransactionOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["Transactions"], dependencies=[Depends(get_current_user)])


@router.post("", status_code=201, response_model=ApiResponse[TransactionDetailOut])
async def create_transaction(req: TransactionCreate, user: CurrentUser):
    try:
        data = await get_transaction_handler().handle_create(req, user_id=user.id)
        return ApiResponse(message="Transaction successful", data=data)
    except PosError:
        raise
    except Exception:
        logger.exception("Create transaction failed")
        raise HTTPException(status_code=500, detail="An error occurred while creating transaction")


@router.get("", response_model=ApiResponse[list[TransactionOut]])
async def list_transactions(
    page:           int = Query(default=1, ge=1),
    limit:          int = Query(default=10, ge=1, le=100),
    start_date:     Optional[date] = Query(default=None, description="YYYY-MM-DD, inclusive"),
    end_date:       Optional[date] = Query(default=None, description="YYYY-MM-DD, inclusive"),
    search:         Optional[str] = Query(default=None, description="Part of the transaction code"),
    payment_method: Optional[PaymentMethod] = Query(default=None),
):
    try:
        items, pagination = await get_transactions().list_page(
            page, limit, start_date, end_date, search, payment_method
        )
        return ApiResponse(data=items, pagination=pagination)
    except PosError:
        raise
    except Exception:
        logger.exception("Get transactions failed")
        raise HTTPException(status_code=500, detail="An error occurred while fetching transactions")


@router.get("/history", response_model=ApiResponse[list[TransactionOut]])
async def transaction_history(
    start_date:     Optional[date] = Query(default=None),
    end_date:       Optional[date] = Query(default=None),
    search:         Optional[str] = Query(default=None),
    payment_method: Optional[PaymentMethod] = Query(default=None),
    limit:          int = Query(default=1000, ge=1, le=10000),
):
    try:
        items, _ = await get_transactions().list_page(1, limit, start_date, end_date, search, payment_method)
        return ApiResponse(data=items)
    except PosError:
        raise
    except Exception:
        logger.exception("Get transaction history failed")
        raise HTTPException(status_code=500, detail="An error occurred while fetching transaction history")


@router.get("/{transaction_id}", response_model=ApiResponse[TransactionDetailOut])
async def get_transaction(transaction_id: int):
    try:
        return ApiResponse(data=await get_transactions().get(transaction_id))
    except PosError:
        raise
    except Exception:
        logger.exception("Get transaction failed")
        raise HTTPException(status_code=500, detail="An error occurred while fetching transaction")


@router.delete("/{transaction_id}", response_model=ApiResponse[None])
async def delete_transaction(transaction_id: int):
    try:
        await get_transactions().delete(transaction_id)
        return ApiResponse(message="Transaction deleted successfully")
    except PosError:
        raise
    except Exception:
        logger.exception("Delete transaction failed")
        raise HTTPException(status_code=500, detail="An error occurred while deleting transaction")
