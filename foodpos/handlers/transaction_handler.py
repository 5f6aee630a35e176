"""
handlers/transaction_handler.py – TransactionHandler class.
Responsibility: validate a sale request, work out the header totals and hand
the normalized sale to TransactionService.

Every check here runs before a database transaction is opened.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..core.errors import BusinessRuleError, InvalidInputError
from ..core.transactions import TransactionService
from ..models import SaleTotals, TransactionCreate, TransactionDetailOut

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
TOLERANCE = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class TransactionHandler:
    """POST /transactions orchestration."""

    def __init__(
        self,
        transactions: TransactionService,
        tax_rate: Decimal = Decimal("0"),
        trust_client_totals: bool = True,
    ) -> None:
        self._transactions = transactions
        self._tax_rate = tax_rate
        self._trust_client_totals = trust_client_totals

    async def handle_create(self, req: TransactionCreate, user_id: Optional[int]) -> TransactionDetailOut:
        totals = self.compute_totals(req)
        return await self._transactions.create(
            req.items, totals, req.payment_method, user_id=user_id, notes=req.notes,
        )

    def compute_totals(self, req: TransactionCreate) -> SaleTotals:
        """Recompute amounts from the lines; client-supplied amounts override
        them unless strict mode is on, in which case they must agree."""
        if not req.items:
            raise InvalidInputError("Transaction items are required")
        is_cash = req.payment_method == "cash"
        if is_cash and req.money_received is None:
            raise InvalidInputError("Money received is required for cash payment")

        total_item = sum(i.quantity for i in req.items)
        computed_subtotal = _money(sum((i.unit_price * i.quantity for i in req.items), Decimal("0")))

        subtotal = computed_subtotal
        if req.subtotal is not None:
            self._check_agrees("subtotal", req.subtotal, computed_subtotal)
            subtotal = _money(req.subtotal)

        discount = _money(req.discount) if req.discount is not None else Decimal("0.00")
        tax = _money(req.tax) if req.tax is not None else _money((subtotal - discount) * self._tax_rate)

        computed_total = subtotal + tax - discount
        total_payment = computed_total
        if req.total_payment is not None:
            self._check_agrees("total_payment", req.total_payment, computed_total)
            total_payment = _money(req.total_payment)
        if total_payment < 0:
            raise InvalidInputError("Discount cannot exceed subtotal plus tax")

        # change_money from the client is ignored
        money_received = _money(req.money_received) if req.money_received is not None else total_payment
        change_money = money_received - total_payment

        if is_cash and change_money < 0:
            logger.info("Rejected cash sale: received %s < total %s", money_received, total_payment)
            raise BusinessRuleError("Payment is less than total")

        return SaleTotals(
            total_item=total_item,
            subtotal=subtotal,
            tax=tax,
            discount=discount,
            total_payment=total_payment,
            money_received=money_received,
            change_money=change_money,
        )

    def _check_agrees(self, field: str, supplied: Decimal, computed: Decimal) -> None:
        if self._trust_client_totals:
            return
        if abs(supplied - computed) > TOLERANCE:
            raise InvalidInputError(f"Supplied {field} {supplied} does not match computed {computed}")
