"""Order status transitions and the ledger writes they trigger."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from ..auth import Actor
from ..config import get_settings
from ..errors import (
    AuthorizationError,
    BusinessRuleViolation,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ..models import Order, ShippingRate, Transaction
from ..statuses import CHARGEABLE_STATUSES, FLOW_INDEX, OrderStatus
from .ledger import LedgerService
from .policy import EDITABLE_FIELDS, RoleTransitionPolicy
from .repository import ORDER_CONFLICT_MESSAGE, OrderRepository
from .shipping import ShippingCostCalculator

logger = logging.getLogger(__name__)


@dataclass
class TransitionOutcome:
    order: Order
    status_changed: bool
    transaction: Optional[Transaction] = None


def resolve_status(current: OrderStatus, requested: Optional[OrderStatus]) -> OrderStatus:
    """Return the status the order ends up in, or raise if the move is not allowed."""
    if current is OrderStatus.CANCELED:
        raise BusinessRuleViolation("لا يمكن تعديل طلب ملغي")
    if requested is None:
        return current
    if requested is OrderStatus.CANCELED:
        if current is OrderStatus.DELIVERED:
            raise BusinessRuleViolation("لا يمكن إلغاء طلب تم تسليمه")
        return requested

    # Backward moves are corrections and always allowed; forward moves go one step at a time.
    if FLOW_INDEX[requested] > FLOW_INDEX[current] + 1:
        raise BusinessRuleViolation(
            f'لا يمكن تجاوز الحالات. يجب إكمال الحالة الحالية "{current.value}" أولاً'
        )
    return requested


class OrderStateMachine:
    def __init__(
        self,
        session: Session,
        policy: Optional[RoleTransitionPolicy] = None,
        calculator: Optional[ShippingCostCalculator] = None,
    ):
        self.repository = OrderRepository(session)
        self.ledger = LedgerService(session)
        self.policy = policy or RoleTransitionPolicy()
        self.calculator = calculator or ShippingCostCalculator(get_settings().shipping_cost_epsilon)

    def apply(
        self,
        order_id: int,
        changes: Mapping[str, Any],
        actor: Actor,
        expected_version: Optional[int] = None,
    ) -> TransitionOutcome:
        changes = dict(changes)
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown order fields: {', '.join(sorted(unknown))}")
        if not changes:
            raise ValidationError("No order fields supplied")

        requested = changes.pop("status", None)
        if requested is not None:
            try:
                requested = OrderStatus(requested)
            except ValueError as exc:
                raise ValidationError(f"Invalid order status: {requested}") from exc
        edited_fields = set(changes) | ({"status"} if requested is not None else set())

        with self.repository.unit_of_work():
            order = self.repository.get_order(order_id)
            if order is None:
                raise NotFoundError("Order not found")
            current = OrderStatus(order.status)

            decision = self.policy.evaluate(actor.role, current, requested, edited_fields)
            if not decision.allowed:
                logger.warning(
                    "denied order %s update for actor %s (%s): %s",
                    order_id,
                    actor.actor_id,
                    actor.role,
                    decision.reason,
                )
                raise AuthorizationError(decision.reason)

            new_status = resolve_status(current, requested)

            if expected_version is not None and expected_version != order.version:
                raise ConflictError(ORDER_CONFLICT_MESSAGE)

            rate = self._resolve_rate(order, changes.pop("shipping_rate_id", None))
            transaction = self._charge_shipping(order, requested, changes.get("weight"), rate, actor)

            for field_name, value in changes.items():
                setattr(order, field_name, value)
            if rate is not None:
                order.shipping_rate = rate

            status_changed = new_status != current
            if status_changed:
                order.status = new_status
                self.repository.append_log(order, new_status)
                logger.info(
                    "order %s moved %s -> %s by actor %s",
                    order.id,
                    current.value,
                    new_status.value,
                    actor.actor_id,
                )

        return TransitionOutcome(
            order=self.repository.get_order(order_id),
            status_changed=status_changed,
            transaction=transaction,
        )

    def _resolve_rate(self, order: Order, rate_id: Optional[int]) -> Optional[ShippingRate]:
        if rate_id is None:
            return None
        rate = self.repository.get_rate(rate_id)
        if rate is None:
            raise ValidationError("Shipping rate not found")
        self.calculator.ensure_same_method(order.shipping_rate, rate)
        return rate

    def _charge_shipping(
        self,
        order: Order,
        requested: Optional[OrderStatus],
        weight: Optional[Decimal],
        rate: Optional[ShippingRate],
        actor: Actor,
    ) -> Optional[Transaction]:
        if requested not in CHARGEABLE_STATUSES or not weight or rate is None:
            return None

        quote = self.calculator.compute(order, weight, rate)
        order.shipping_cost = quote.new_cost
        order.freeze_rate(rate)

        if not quote.is_material or order.customer_id is None:
            return None
        if quote.delta > 0:
            memo = f"خصم سعر الشحن - {order.name} (#{order.tracking_number})"
        else:
            memo = f"استرداد فرق سعر الشحن - {order.name} (#{order.tracking_number})"
        return self.ledger.apply_delta(order.customer_id, quote.delta, actor.actor_id, memo)
