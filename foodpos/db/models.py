"""
db/models.py – SQLAlchemy ORM models for the POS schema.

Tables are created by init_db() (startup / seed command).
Money columns are NUMERIC(12,2) and come back as Decimal.
"""
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship

Money = Numeric(12, 2)

FOOD_STATUSES = ("available", "out_of_stock", "inactive")
PAYMENT_METHODS = ("cash", "debit", "credit", "qris")
USER_ROLES = ("admin", "cashier")


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id            = Column(Integer, primary_key=True, autoincrement=True)
    username      = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name     = Column(String(100), nullable=False, default="")
    role          = Column(String(20), nullable=False, default="cashier")
    created_at    = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


class SessionToken(Base):
    __tablename__ = "session_tokens"

    id         = Column(Integer, primary_key=True, autoincrement=True)
    user_id    = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    expires_at = Column(DateTime, nullable=False)
    is_revoked = Column(Boolean, nullable=False, default=False)

    user = relationship("User")


class Category(Base):
    __tablename__ = "categories"

    id            = Column(Integer, primary_key=True, autoincrement=True)
    category_name = Column(String(100), nullable=False, unique=True)
    description   = Column(Text, nullable=True)
    created_at    = Column(DateTime, nullable=False, default=datetime.now)
    updated_at    = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    foods = relationship("Food", back_populates="category")

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.category_name!r}>"


class Food(Base):
    __tablename__ = "foods"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_foods_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_foods_price_non_negative"),
    )

    id          = Column(Integer, primary_key=True, autoincrement=True)
    food_code   = Column(String(20), nullable=False, unique=True)
    food_name   = Column(String(150), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    description = Column(Text, nullable=True)
    price       = Column(Money, nullable=False, default=0)
    stock       = Column(Integer, nullable=False, default=0)
    image       = Column(String(255), nullable=True)
    status      = Column(String(20), nullable=False, default="available")
    created_at  = Column(DateTime, nullable=False, default=datetime.now)
    updated_at  = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    category = relationship("Category", back_populates="foods")

    def __repr__(self) -> str:
        return f"<Food id={self.id} code={self.food_code!r}>"


class Transaction(Base):
    __tablename__ = "transactions"

    id               = Column(Integer, primary_key=True, autoincrement=True)
    transaction_code = Column(String(20), nullable=False, unique=True)
    transaction_date = Column(DateTime, nullable=False, default=datetime.now, index=True)
    user_id          = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    total_item       = Column(Integer, nullable=False, default=0)
    subtotal         = Column(Money, nullable=False, default=0)
    tax              = Column(Money, nullable=False, default=0)
    discount         = Column(Money, nullable=False, default=0)
    total_payment    = Column(Money, nullable=False, default=0)
    money_received   = Column(Money, nullable=False, default=0)
    change_money     = Column(Money, nullable=False, default=0)
    payment_method   = Column(String(20), nullable=False, default="cash")
    notes            = Column(Text, nullable=True)
    status           = Column(String(20), nullable=False, default="completed")

    user    = relationship("User")
    details = relationship(
        "TransactionDetail",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionDetail.id",
    )

    def __repr__(self) -> str:
        return f"<Transaction id={self.id} code={self.transaction_code!r}>"


class TransactionDetail(Base):
    __tablename__ = "transaction_details"

    id             = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True)
    food_id        = Column(Integer, ForeignKey("foods.id"), nullable=False, index=True)
    food_name      = Column(String(150), nullable=False, default="")
    unit_price     = Column(Money, nullable=False, default=0)
    quantity       = Column(Integer, nullable=False)
    subtotal       = Column(Money, nullable=False, default=0)
    notes          = Column(Text, nullable=True)

    transaction = relationship("Transaction", back_populates="details")
    food        = relationship("Food")
