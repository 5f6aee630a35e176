"""routes/auth.py – POST /login, GET /me, POST /logout"""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from ..core.errors import PosError
from ..deps import CurrentUser, get_auth, get_bearer_token
from ..models import ApiResponse, LoginData, LoginRequest, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post("/login", response_model=ApiResponse[LoginData])
async def login(req: LoginRequest):
    try:
        data = await get_auth().login(req.username, req.password)
        return ApiResponse(message="Login successful", data=data)
    except PosError:
        raise
    except Exception:
        logger.exception("Login failed")
        raise HTTPException(status_code=500, detail="An error occurred during login")


@router.get("/me", response_model=ApiResponse[UserOut])
async def me(user: CurrentUser):
    return ApiResponse(data=user)


@router.post("/logout", response_model=ApiResponse[None])
async def logout(user: CurrentUser, token: Annotated[str, Depends(get_bearer_token)]):
    """Revoke the token used for this request."""
    try:
        await get_auth().logout(token)
        logger.info("User %s logged out", user.username)
        return ApiResponse(message="Logout successful")
    except PosError:
        raise
    except Exception:
        logger.exception("Logout failed")
        raise HTTPException(status_code=500, detail="An error occurred during logout")
