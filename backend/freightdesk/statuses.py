"""Closed vocabularies shared by the models, services and API."""

from __future__ import annotations

import enum
from typing import Dict, Optional, Tuple


class OrderStatus(str, enum.Enum):
    PURCHASED = "purchased"
    ARRIVED_TO_CHINA = "arrived_to_china"
    SHIPPING_TO_LIBYA = "shipping_to_libya"
    ARRIVED_LIBYA = "arrived_libya"
    READY_FOR_PICKUP = "ready_for_pickup"
    DELIVERED = "delivered"
    CANCELED = "canceled"


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    PURCHASE_OFFICER = "PURCHASE_OFFICER"
    CHINA_WAREHOUSE = "CHINA_WAREHOUSE"
    LIBYA_WAREHOUSE = "LIBYA_WAREHOUSE"
    CUSTOMER = "CUSTOMER"


class ShippingType(str, enum.Enum):
    AIR = "AIR"
    SEA = "SEA"


class Currency(str, enum.Enum):
    USD = "USD"
    LYD = "LYD"
    CNY = "CNY"


class TransactionType(str, enum.Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"


# Forward pipeline; canceled sits outside it as a terminal state.
STATUS_FLOW: Tuple[OrderStatus, ...] = (
    OrderStatus.PURCHASED,
    OrderStatus.ARRIVED_TO_CHINA,
    OrderStatus.SHIPPING_TO_LIBYA,
    OrderStatus.ARRIVED_LIBYA,
    OrderStatus.READY_FOR_PICKUP,
    OrderStatus.DELIVERED,
)
FLOW_INDEX: Dict[OrderStatus, int] = {status: index for index, status in enumerate(STATUS_FLOW)}

if set(FLOW_INDEX) | {OrderStatus.CANCELED} != set(OrderStatus):
    raise RuntimeError("every order status must be either in STATUS_FLOW or canceled")

# Statuses that trigger a shipping charge when weight and rate arrive with them
CHARGEABLE_STATUSES = frozenset({OrderStatus.ARRIVED_TO_CHINA, OrderStatus.SHIPPING_TO_LIBYA})

CURRENCY_SYMBOLS: Dict[Currency, str] = {
    Currency.USD: "$",
    Currency.LYD: "د.ل",
    Currency.CNY: "¥",
}

COUNTRY_NAMES: Dict[str, str] = {
    "CHINA": "الصين",
    "USA": "أمريكا",
    "TURKEY": "تركيا",
    "DUBAI": "دبي",
}


def country_name(country: Optional[str]) -> str:
    if not country:
        return COUNTRY_NAMES["CHINA"]
    return COUNTRY_NAMES.get(country.upper(), country)


def status_label(status: OrderStatus, country: Optional[str] = None) -> str:
    """Customer-facing label; the origin warehouse step names the order's country."""
    labels = {
        OrderStatus.PURCHASED: "تم الشراء",
        OrderStatus.ARRIVED_TO_CHINA: f"وصل إلى {country_name(country)}",
        OrderStatus.SHIPPING_TO_LIBYA: "قيد الشحن لليبيا",
        OrderStatus.ARRIVED_LIBYA: "وصل إلى ليبيا",
        OrderStatus.READY_FOR_PICKUP: "جاهز للاستلام",
        OrderStatus.DELIVERED: "تم التسليم",
        OrderStatus.CANCELED: "ملغي",
    }
    return labels[OrderStatus(status)]
