"""
core/codes.py – Sequential human-readable codes (MKN0001, TRX202610160001).

The highest code in scope is read FOR UPDATE inside the caller's transaction
and the new row is flushed inside a SAVEPOINT. A unique-key collision on the
code column only rolls back the savepoint; the next attempt uses a strictly
larger number. After MAX_ATTEMPTS the creation fails with ConflictError.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Session

from .errors import ConflictError

logger = logging.getLogger(__name__)

FOOD_PREFIX = "MKN"
TRANSACTION_PREFIX = "TRX"
CODE_WIDTH = 4
MAX_ATTEMPTS = 5


def food_prefix() -> str:
    return FOOD_PREFIX


def transaction_prefix(day: date) -> str:
    """Date-scoped prefix; the counter restarts every calendar day."""
    return f"{TRANSACTION_PREFIX}{day:%Y%m%d}"


def format_code(prefix: str, number: int) -> str:
    return f"{prefix}{number:0{CODE_WIDTH}d}"


def parse_number(code: Optional[str], prefix: str) -> int:
    """Numeric suffix of `code` for `prefix`; 0 when absent or not numeric."""
    if not code or not code.startswith(prefix):
        return 0
    suffix = code[len(prefix):]
    return int(suffix) if suffix.isdigit() else 0


def next_number(session: Session, column: InstrumentedAttribute, prefix: str) -> int:
    """Max suffix in scope + 1. Locks the current max row where supported."""
    # length first: MKN10000 sorts after MKN9999
    stmt = (
        select(column)
        .where(column.like(f"{prefix}%"))
        .order_by(func.length(column).desc(), column.desc())
        .limit(1)
        .with_for_update()
    )
    latest = session.execute(stmt).scalar_one_or_none()
    return parse_number(latest, prefix) + 1


def insert_with_code(
    session: Session,
    obj,
    column: InstrumentedAttribute,
    prefix: str,
    max_attempts: int = MAX_ATTEMPTS,
) -> str:
    """Assign the next code in scope to `obj` and flush it. Returns the code."""
    attr = column.key
    tried = 0
    for attempt in range(1, max_attempts + 1):
        number = max(next_number(session, column, prefix), tried + 1)
        code = format_code(prefix, number)
        setattr(obj, attr, code)
        try:
            with session.begin_nested():
                session.add(obj)
                session.flush()
        except IntegrityError as e:
            if attr not in str(e.orig):
                raise
            logger.warning("Code %s already taken (attempt %d/%d)", code, attempt, max_attempts)
            tried = number
            continue
        return code
    raise ConflictError(f"Could not generate a unique {attr} after {max_attempts} attempts")
