"""
main.py – FastAPI app entry point (slim wire-up only).
Routes, lifespan and the error envelope. No business logic here.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.errors import PosError
from .db.session import init_db
from .deps import get_settings
from .routes import auth, categories, dashboard, foods, system, transactions

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Creating schema on %s", settings.database_url)
    init_db(settings.database_url)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    logger.info("Ready.")
    yield
    logger.info("Shutdown.")


app = FastAPI(
    title="FoodPOS API",
    description="Point-of-sale backend for a small food outlet.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (system, auth, categories, foods, transactions, dashboard):
    app.include_router(module.router, prefix="/api")

app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


# ── Error envelope ─────────────────────────────────────────────────────────────

def _fail(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message, **extra})


@app.exception_handler(PosError)
async def pos_error_handler(request: Request, exc: PosError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _fail(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return _fail(400, "Invalid request")
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path", "form"))
    message = first.get("msg", "Invalid request")
    return _fail(400, f"{field}: {message}" if field else message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _fail(500, "Internal server error")
