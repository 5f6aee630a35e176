"""
models.py – Pydantic schemas for request/response bodies.
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Generic, List, Literal, Optional, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer

# Decimal internally, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

FoodStatus = Literal["available", "out_of_stock", "inactive"]
PaymentMethod = Literal["cash", "debit", "credit", "qris"]

T = TypeVar("T")


# ── Envelope ───────────────────────────────────────────────────────────────────

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    pagination: Optional[Pagination] = None


# ── Auth ───────────────────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: str
    role: str


class LoginData(BaseModel):
    user: UserOut
    token: str
    expires_at: datetime


# ── Categories ─────────────────────────────────────────────────────────────────

class CategoryIn(BaseModel):
    category_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category_name: str
    description: Optional[str] = None
    food_count: int = 0
    created_at: datetime
    updated_at: datetime


# ── Foods ──────────────────────────────────────────────────────────────────────

class FoodOut(BaseModel):
    id: int
    food_code: str
    food_name: str
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    description: Optional[str] = None
    price: Money
    stock: int
    image: Optional[str] = None
    image_url: Optional[str] = None
    status: FoodStatus
    created_at: datetime
    updated_at: datetime


class FoodWrite(BaseModel):
    """Form fields of POST/PUT /foods, after validation."""
    food_name: str
    category_id: int
    price: Decimal
    stock: int = 0
    description: Optional[str] = None
    status: Optional[str] = None


# ── Transactions ───────────────────────────────────────────────────────────────

class SaleItemIn(BaseModel):
    """One cart line. Accepted aliases are folded into one field name here."""
    food_id: int
    quantity: int = Field(..., gt=0, validation_alias=AliasChoices("quantity", "qty"))
    unit_price: Decimal = Field(..., ge=0, validation_alias=AliasChoices("unit_price", "price"))
    notes: Optional[str] = None


class TransactionCreate(BaseModel):
    items: List[SaleItemIn] = Field(default_factory=list)
    payment_method: PaymentMethod = "cash"
    money_received: Optional[Decimal] = Field(default=None, ge=0)
    subtotal: Optional[Decimal] = Field(default=None, ge=0)
    tax: Optional[Decimal] = Field(default=None, ge=0)
    discount: Optional[Decimal] = Field(default=None, ge=0)
    total_payment: Optional[Decimal] = Field(default=None, ge=0)
    change_money: Optional[Decimal] = None  # ignored, always recomputed
    notes: Optional[str] = None


class SaleTotals(BaseModel):
    """Header amounts as they will be stored."""
    total_item: int
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total_payment: Decimal
    money_received: Decimal
    change_money: Decimal


class TransactionLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    food_id: int
    food_code: Optional[str] = None
    food_name: str
    unit_price: Money
    quantity: int
    subtotal: Money
    notes: Optional[str] = None


class TransactionOut(BaseModel):
    id: int
    transaction_code: str
    transaction_date: datetime
    user_id: Optional[int] = None
    cashier: Optional[str] = None
    total_item: int
    subtotal: Money
    tax: Money
    discount: Money
    total_payment: Money
    money_received: Money
    change_money: Money
    payment_method: str
    notes: Optional[str] = None
    status: str
    item_count: int = 0


class TransactionDetailOut(TransactionOut):
    items: List[TransactionLineOut] = []


# ── Dashboard ──────────────────────────────────────────────────────────────────

class TopFood(BaseModel):
    id: int
    food_name: str
    image: Optional[str] = None
    category_name: Optional[str] = None
    quantity_sold: int


class DailySales(BaseModel):
    date: str
    total_transactions: int
    total_revenue: Money


class CategoryStat(BaseModel):
    category_name: str
    total_foods: int
    total_sold: int


class SummaryCounters(BaseModel):
    today_revenue: Money
    today_transactions: int
    today_items_sold: int
    total_foods: int
    total_categories: int


class DashboardSummary(BaseModel):
    summary: SummaryCounters
    popular_foods: List[TopFood]
    recent_transactions: List[TransactionOut]
    weekly_sales: List[DailySales]
    category_stats: List[CategoryStat]
