"""
deps.py – Dependency Injection: singleton service instances + auth dependency.
Built once at import from Settings.from_env().
"""
from typing import Annotated, Optional

from fastapi import Depends, Header

from .config import Settings
from .core.auth import AuthService
from .core.categories import CategoryService
from .core.dashboard import DashboardService
from .core.errors import AuthError
from .core.foods import FoodService
from .core.storage import ImageStorage
from .core.transactions import TransactionService
from .handlers.food_handler import FoodHandler
from .handlers.transaction_handler import TransactionHandler
from .models import UserOut

# ── Core singletons ────────────────────────────────────────────────────────────

_settings     = Settings.from_env()
_auth         = AuthService(
    _settings.database_url,
    token_ttl_hours=_settings.token_ttl_hours,
    bcrypt_rounds=_settings.bcrypt_rounds,
)
_categories   = CategoryService(_settings.database_url)
_foods        = FoodService(_settings.database_url)
_transactions = TransactionService(_settings.database_url, allow_delete=_settings.allow_transaction_delete)
_dashboard    = DashboardService(_settings.database_url, _transactions)
_storage      = ImageStorage(_settings.upload_dir)

# ── Handler singletons ─────────────────────────────────────────────────────────

_food_h        = FoodHandler(_foods, _storage)
_transaction_h = TransactionHandler(
    _transactions,
    tax_rate=_settings.tax_rate,
    trust_client_totals=_settings.trust_client_totals,
)


# ── Getters (used in routes) ───────────────────────────────────────────────────

def get_settings()            -> Settings:           return _settings
def get_auth()                -> AuthService:        return _auth
def get_categories()          -> CategoryService:    return _categories
def get_foods()               -> FoodService:        return _foods
def get_transactions()        -> TransactionService: return _transactions
def get_dashboard()           -> DashboardService:   return _dashboard
def get_storage()             -> ImageStorage:       return _storage
def get_food_handler()        -> FoodHandler:        return _food_h
def get_transaction_handler() -> TransactionHandler: return _transaction_h


# ── Auth ───────────────────────────────────────────────────────────────────────

def get_bearer_token(authorization: Annotated[Optional[str], Header()] = None) -> str:
    """Extract the token from `Authorization: Bearer <token>`; 401 otherwise."""
    if not authorization:
        raise AuthError("Access token is required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Invalid authorization header")
    return token.strip()


async def get_current_user(token: Annotated[str, Depends(get_bearer_token)]) -> UserOut:
    return await get_auth().authenticate(token)


CurrentUser = Annotated[UserOut, Depends(get_current_user)]
