"""Persistence boundary for orders and the rows written alongside them."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from ..errors import BusinessRuleViolation, ConflictError
from ..models import Order, OrderLog, ShippingRate
from ..statuses import OrderStatus

logger = logging.getLogger(__name__)

ORDER_CONFLICT_MESSAGE = "تم تعديل الطلب من مستخدم آخر، يرجى إعادة التحميل والمحاولة مجدداً"


@contextmanager
def unit_of_work(
    session: Session,
    duplicate_message: str = "القيمة مستخدمة بالفعل",
    conflict_message: str = "تم تعديل السجل من مستخدم آخر، يرجى إعادة التحميل والمحاولة مجدداً",
) -> Iterator[Session]:
    """Commit once if the block finishes, roll back everything if it raises."""
    try:
        yield session
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.info("integrity error rolled back: %s", exc.orig)
        raise BusinessRuleViolation(duplicate_message) from exc
    except StaleDataError as exc:
        session.rollback()
        logger.warning("stale write rolled back: %s", exc)
        raise ConflictError(conflict_message) from exc
    except Exception:
        session.rollback()
        raise


class OrderRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_order(self, order_id: int) -> Optional[Order]:
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .options(
                selectinload(Order.customer),
                selectinload(Order.shipping_rate),
                selectinload(Order.logs),
            )
        )
        return self.session.scalars(stmt).first()

    def get_rate(self, rate_id: int) -> Optional[ShippingRate]:
        return self.session.get(ShippingRate, rate_id)

    def append_log(self, order: Order, status: OrderStatus, note: Optional[str] = None) -> OrderLog:
        entry = OrderLog(order=order, status=status, note=note)
        self.session.add(entry)
        return entry

    def add(self, order: Order) -> Order:
        self.session.add(order)
        return order

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        with unit_of_work(
            self.session,
            duplicate_message="رقم التتبع مستخدم بالفعل",
            conflict_message=ORDER_CONFLICT_MESSAGE,
        ) as session:
            yield session
