"""Pydantic schemas for request/response bodies."""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .statuses import Currency, OrderStatus, ShippingType, TransactionType


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    code: str = Field(..., min_length=1, max_length=32, description="Customer shipping code")
    phone: Optional[str] = Field(None, max_length=32)


class CustomerOut(BaseModel):
    id: int
    name: str
    code: str
    phone: Optional[str] = None
    balance_usd: Decimal
    balance_lyd: Decimal
    balance_cny: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PushTokenIn(BaseModel):
    token: str = Field(..., min_length=1, max_length=512)


class WalletBalance(BaseModel):
    currency: Currency
    balance: Decimal
    symbol: str


class WalletOut(BaseModel):
    customer_id: int
    customer_name: str
    customer_code: str
    wallets: Dict[str, WalletBalance]


class ShippingRateCreate(BaseModel):
    type: ShippingType
    name: str = Field(..., min_length=1, max_length=120)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    country: str = Field("CHINA", max_length=32)


class ShippingRateUpdate(BaseModel):
    """The AIR/SEA type is fixed at creation; only name, price and country move."""

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    country: Optional[str] = Field(None, max_length=32)

    model_config = ConfigDict(extra="forbid")


class ShippingRateOut(BaseModel):
    id: int
    type: ShippingType
    name: str
    price: Decimal
    country: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderCreate(BaseModel):
    tracking_number: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    usd_price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    cny_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    product_url: Optional[str] = None
    notes: Optional[str] = None
    customer_id: Optional[int] = None
    weight: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=3)
    country: str = Field("CHINA", max_length=32)
    flight_number: Optional[str] = Field(None, max_length=64)


NON_NULLABLE_ORDER_FIELDS = ("tracking_number", "name", "usd_price")


class OrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    weight: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=3)
    tracking_number: Optional[str] = Field(None, min_length=1, max_length=64)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    usd_price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    cny_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    product_url: Optional[str] = None
    notes: Optional[str] = None
    shipping_rate_id: Optional[int] = Field(None, alias="shippingRateId")
    flight_number: Optional[str] = Field(None, alias="flightNumber", max_length=64)
    version: Optional[int] = Field(None, ge=1, description="Expected order version for optimistic locking")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @model_validator(mode="after")
    def check_meaningful(self) -> "OrderUpdate":
        if not self.model_fields_set - {"version"}:
            raise ValueError("At least one order field must be supplied")
        for field_name in NON_NULLABLE_ORDER_FIELDS:
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"version"})


class OrderLogOut(BaseModel):
    id: int
    status: OrderStatus
    note: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderBase(BaseModel):
    id: int
    tracking_number: str
    name: str
    product_url: Optional[str] = None
    usd_price: Decimal
    cny_price: Optional[Decimal] = None
    weight: Optional[Decimal] = None
    status: OrderStatus
    country: str
    flight_number: Optional[str] = None
    notes: Optional[str] = None
    customer_id: Optional[int] = None
    shipping_rate_id: Optional[int] = None
    shipping_cost: Optional[Decimal] = None
    shipping_rate_name: Optional[str] = None
    shipping_rate_price: Optional[Decimal] = None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderListItem(OrderBase):
    customer: Optional[CustomerOut] = None


class OrderOut(OrderBase):
    customer: Optional[CustomerOut] = None
    shipping_rate: Optional[ShippingRateOut] = None
    logs: List[OrderLogOut] = []


class PaginationMeta(BaseModel):
    count: int
    next_cursor: Optional[int] = None


class PaginatedOrders(BaseModel):
    data: List[OrderListItem]
    meta: PaginationMeta


class OrderStats(BaseModel):
    total_orders: int
    by_status: Dict[str, int]
    by_country: Dict[str, int]


class TransactionCreate(BaseModel):
    customer_id: int = Field(..., alias="customerId")
    type: TransactionType
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    currency: Currency
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class TransactionOut(BaseModel):
    id: int
    customer_id: int
    type: TransactionType
    amount: Decimal
    currency: Currency
    balance_before: Decimal
    balance_after: Decimal
    notes: Optional[str] = None
    created_by: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
