"""Shipping cost quotes against the rate catalog."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..errors import BusinessRuleViolation
from ..models import Order, ShippingRate

CENT = Decimal("0.01")


@dataclass(frozen=True)
class CostQuote:
    new_cost: Decimal
    delta: Decimal
    epsilon: Decimal = CENT

    @property
    def is_material(self) -> bool:
        return abs(self.delta) > self.epsilon


class ShippingCostCalculator:
    def __init__(self, epsilon: Decimal = CENT):
        self.epsilon = epsilon

    def ensure_same_method(self, current: Optional[ShippingRate], new: ShippingRate) -> None:
        """AIR and SEA are never swapped once an order has a rate."""
        if current is not None and current.type != new.type:
            raise BusinessRuleViolation("لا يمكن تغيير نوع الشحن (جوي/بحري) بعد تحديده")

    def compute(self, order: Order, new_weight: Decimal, rate: ShippingRate) -> CostQuote:
        self.ensure_same_method(order.shipping_rate, rate)
        new_cost = (Decimal(new_weight) * Decimal(rate.price)).quantize(CENT, rounding=ROUND_HALF_UP)
        previous = Decimal(order.shipping_cost) if order.shipping_cost is not None else Decimal("0")
        return CostQuote(new_cost=new_cost, delta=new_cost - previous, epsilon=self.epsilon)
