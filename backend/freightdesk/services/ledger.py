"""Customer wallet ledger.

Every balance change on a Customer goes through this module and is paired
with exactly one Transaction row carrying the before/after snapshot. Two entry
points exist:

* ``apply_delta`` is used by the order state machine when a shipping charge
  changes. It joins the caller's unit of work and never commits, and it lets
  the balance go negative.
* ``create_transaction`` is the manual deposit/withdrawal path. It runs in its
  own unit of work and refuses withdrawals larger than the balance.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import BusinessRuleViolation, NotFoundError, ValidationError
from ..models import Customer, Transaction
from ..statuses import Currency, TransactionType
from .repository import unit_of_work

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

BALANCE_COLUMNS = {
    Currency.USD: "balance_usd",
    Currency.LYD: "balance_lyd",
    Currency.CNY: "balance_cny",
}


def get_balance(customer: Customer, currency: Currency) -> Decimal:
    value = getattr(customer, BALANCE_COLUMNS[Currency(currency)])
    return Decimal(value or 0)


def _set_balance(customer: Customer, currency: Currency, value: Decimal) -> None:
    setattr(customer, BALANCE_COLUMNS[Currency(currency)], value)


def _parse_enum(enum_cls, value, message: str):
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValidationError(message) from exc


def _parse_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError("Amount must be a number") from exc
    if not amount.is_finite():
        raise ValidationError("Amount must be a number")
    amount = amount.quantize(CENT)
    # sub-cent inputs round to zero and would write an empty ledger entry
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    return amount


class LedgerService:
    def __init__(self, session: Session):
        self.session = session

    def _lock_customer(self, customer_id: int) -> Customer:
        # FOR UPDATE keeps two concurrent writers from reading the same balance_before
        stmt = select(Customer).where(Customer.id == customer_id).with_for_update()
        customer = self.session.scalars(stmt).first()
        if customer is None:
            raise NotFoundError("Customer not found")
        return customer

    def _record(
        self,
        customer: Customer,
        tx_type: TransactionType,
        amount: Decimal,
        currency: Currency,
        balance_before: Decimal,
        balance_after: Decimal,
        notes: Optional[str],
        actor_id: int,
    ) -> Transaction:
        _set_balance(customer, currency, balance_after)
        entry = Transaction(
            customer_id=customer.id,
            type=tx_type,
            amount=amount,
            currency=currency,
            balance_before=balance_before,
            balance_after=balance_after,
            notes=notes,
            created_by=actor_id,
        )
        self.session.add(entry)
        logger.info(
            "ledger %s customer=%s %s %s balance %s -> %s",
            tx_type.value,
            customer.id,
            amount,
            currency.value,
            balance_before,
            balance_after,
        )
        return entry

    def apply_delta(
        self,
        customer_id: int,
        delta: Decimal,
        actor_id: int,
        memo: Optional[str] = None,
        currency: Currency = Currency.USD,
    ) -> Transaction:
        """Charge (positive delta) or refund (negative delta) inside the caller's unit of work."""
        currency = _parse_enum(Currency, currency, "Invalid currency")
        delta = Decimal(delta).quantize(CENT)
        if delta == 0:
            raise ValidationError("Ledger delta must be non-zero")
        customer = self._lock_customer(customer_id)
        balance_before = get_balance(customer, currency)
        balance_after = balance_before - delta
        tx_type = TransactionType.WITHDRAWAL if delta > 0 else TransactionType.DEPOSIT
        return self._record(
            customer,
            tx_type,
            abs(delta),
            currency,
            balance_before,
            balance_after,
            memo,
            actor_id,
        )

    def create_transaction(
        self,
        customer_id: int,
        tx_type,
        amount,
        currency,
        actor_id: int,
        notes: Optional[str] = None,
    ) -> Transaction:
        tx_type = _parse_enum(TransactionType, tx_type, "Invalid transaction type")
        currency = _parse_enum(Currency, currency, "Invalid currency")
        amount = _parse_amount(amount)

        with unit_of_work(self.session):
            customer = self._lock_customer(customer_id)
            balance_before = get_balance(customer, currency)
            if tx_type is TransactionType.DEPOSIT:
                balance_after = balance_before + amount
            else:
                if amount > balance_before:
                    raise BusinessRuleViolation("الرصيد غير كافٍ")
                balance_after = balance_before - amount
            entry = self._record(
                customer,
                tx_type,
                amount,
                currency,
                balance_before,
                balance_after,
                notes,
                actor_id,
            )
        self.session.refresh(entry)
        return entry

    def list_transactions(
        self,
        customer_id: int,
        currency: Optional[Currency] = None,
        tx_type: Optional[TransactionType] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        search: Optional[str] = None,
    ) -> List[Transaction]:
        stmt = select(Transaction).where(Transaction.customer_id == customer_id)
        if currency:
            stmt = stmt.where(Transaction.currency == Currency(currency))
        if tx_type:
            stmt = stmt.where(Transaction.type == TransactionType(tx_type))
        if start_date:
            stmt = stmt.where(Transaction.created_at >= start_date)
        if end_date:
            stmt = stmt.where(Transaction.created_at <= end_date)
        if search:
            stmt = stmt.where(Transaction.notes.ilike(f"%{search}%"))
        stmt = stmt.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        return list(self.session.scalars(stmt).all())
