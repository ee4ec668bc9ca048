"""Which role may move an order to which status, and which fields it may touch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from ..statuses import OrderStatus, Role

ALL_STATUSES: FrozenSet[OrderStatus] = frozenset(OrderStatus)

EDITABLE_FIELDS: FrozenSet[str] = frozenset(
    {
        "status",
        "weight",
        "tracking_number",
        "name",
        "usd_price",
        "cny_price",
        "product_url",
        "notes",
        "shipping_rate_id",
        "flight_number",
    }
)
COMMERCIAL_FIELDS: FrozenSet[str] = frozenset({"name", "usd_price", "cny_price", "product_url"})
WAREHOUSE_FIELDS = EDITABLE_FIELDS - COMMERCIAL_FIELDS


@dataclass(frozen=True)
class RolePermissions:
    allowed_statuses: FrozenSet[OrderStatus]
    allowed_fields: FrozenSet[str]


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(False, reason)


DEFAULT_PERMISSIONS: Dict[Role, RolePermissions] = {
    Role.ADMIN: RolePermissions(ALL_STATUSES, EDITABLE_FIELDS),
    Role.PURCHASE_OFFICER: RolePermissions(frozenset(), EDITABLE_FIELDS),
    Role.CHINA_WAREHOUSE: RolePermissions(
        frozenset({OrderStatus.PURCHASED, OrderStatus.ARRIVED_TO_CHINA, OrderStatus.SHIPPING_TO_LIBYA}),
        WAREHOUSE_FIELDS,
    ),
    Role.LIBYA_WAREHOUSE: RolePermissions(
        frozenset(
            {
                OrderStatus.SHIPPING_TO_LIBYA,
                OrderStatus.ARRIVED_LIBYA,
                OrderStatus.READY_FOR_PICKUP,
                OrderStatus.DELIVERED,
            }
        ),
        WAREHOUSE_FIELDS,
    ),
}


class RoleTransitionPolicy:
    """Pure lookup over a role -> permissions table. No I/O."""

    def __init__(self, permissions: Optional[Mapping[Role, RolePermissions]] = None):
        self.permissions = dict(permissions or DEFAULT_PERMISSIONS)

    def evaluate(
        self,
        role: str,
        current_status: OrderStatus,
        requested_status: Optional[OrderStatus],
        edited_fields: Iterable[str],
    ) -> Decision:
        try:
            permissions = self.permissions.get(Role(role))
        except ValueError:
            permissions = None
        if permissions is None:
            return Decision.deny("unrecognized role")

        target = requested_status or current_status
        if target != current_status:
            if not (
                current_status in permissions.allowed_statuses
                and target in permissions.allowed_statuses
            ):
                return Decision.deny(
                    f"role {role} cannot move an order from {current_status.value} to {target.value}"
                )

        forbidden = sorted(set(edited_fields) - permissions.allowed_fields)
        if forbidden:
            return Decision.deny(f"role {role} cannot edit: {', '.join(forbidden)}")
        return Decision.allow()
