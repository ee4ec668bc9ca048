"""SQLAlchemy models."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .statuses import Currency, OrderStatus, ShippingType, TransactionType


def _enum_column(enum_cls, length: int = 32) -> Enum:
    # Stored as plain strings so the database stays portable between sqlite and postgres
    return Enum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda members: [member.value for member in members],
    )


@dataclass(frozen=True)
class RateSnapshot:
    """Rate name and price as they were when the order was charged."""

    name: str
    price: Decimal


class ShippingRate(Base):
    __tablename__ = "shipping_rates"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(_enum_column(ShippingType, 8), nullable=False)
    name = Column(String(120), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    country = Column(String(32), nullable=False, default="CHINA")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<ShippingRate id={self.id} type={self.type} price={self.price}>"


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    code = Column(String(32), nullable=False, unique=True, index=True)
    phone = Column(String(32), nullable=True)
    # Written only by the ledger service, always together with a Transaction row
    balance_usd = Column(Numeric(14, 2), nullable=False, default=0)
    balance_lyd = Column(Numeric(14, 2), nullable=False, default=0)
    balance_cny = Column(Numeric(14, 2), nullable=False, default=0)
    push_tokens = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    orders = relationship("Order", back_populates="customer")
    transactions = relationship(
        "Transaction",
        back_populates="customer",
        order_by="Transaction.id",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Customer id={self.id} code={self.code!r}>"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    tracking_number = Column(String(64), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    product_url = Column(Text, nullable=True)
    usd_price = Column(Numeric(12, 2), nullable=False, default=0)
    cny_price = Column(Numeric(12, 2), nullable=True)
    weight = Column(Numeric(10, 3), nullable=True)
    status = Column(_enum_column(OrderStatus), nullable=False, default=OrderStatus.PURCHASED, index=True)
    country = Column(String(32), nullable=False, default="CHINA")
    flight_number = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    shipping_rate_id = Column(Integer, ForeignKey("shipping_rates.id"), nullable=True)
    shipping_cost = Column(Numeric(12, 2), nullable=True)
    shipping_rate_name = Column(String(120), nullable=True)
    shipping_rate_price = Column(Numeric(12, 2), nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    customer = relationship("Customer", back_populates="orders")
    shipping_rate = relationship("ShippingRate")
    logs = relationship(
        "OrderLog",
        back_populates="order",
        order_by="OrderLog.id",
    )

    # UPDATE ... WHERE version = :loaded; a stale writer gets StaleDataError at flush
    __mapper_args__ = {"version_id_col": version}

    @property
    def rate_snapshot(self) -> Optional[RateSnapshot]:
        if self.shipping_rate_name is None or self.shipping_rate_price is None:
            return None
        return RateSnapshot(name=self.shipping_rate_name, price=self.shipping_rate_price)

    def freeze_rate(self, rate: ShippingRate) -> None:
        self.shipping_rate_name = rate.name
        self.shipping_rate_price = rate.price

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Order id={self.id} tracking={self.tracking_number!r} status={self.status}>"


class OrderLog(Base):
    __tablename__ = "order_logs"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    status = Column(_enum_column(OrderStatus), nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    order = relationship("Order", back_populates="logs")


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    type = Column(_enum_column(TransactionType, 16), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    currency = Column(_enum_column(Currency, 8), nullable=False)
    balance_before = Column(Numeric(14, 2), nullable=False)
    balance_after = Column(Numeric(14, 2), nullable=False)
    notes = Column(Text, nullable=True)
    created_by = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    customer = relationship("Customer", back_populates="transactions")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Transaction id={self.id} {self.type} {self.amount} {self.currency}>"
