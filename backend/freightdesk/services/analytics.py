"""Order counts for the dashboard cards."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..models import Order


def order_summary(db: Session, customer_id: Optional[int] = None) -> dict:
    total_stmt = select(func.count()).select_from(Order)
    status_stmt = select(Order.status, func.count()).group_by(Order.status)
    country_stmt = select(Order.country, func.count()).group_by(Order.country)

    if customer_id is not None:
        total_stmt = total_stmt.where(Order.customer_id == customer_id)
        status_stmt = status_stmt.where(Order.customer_id == customer_id)
        country_stmt = country_stmt.where(Order.customer_id == customer_id)

    total = db.scalar(total_stmt) or 0
    status_rows = db.execute(status_stmt).all()
    country_rows = db.execute(country_stmt).all()

    return {
        "total_orders": total,
        "by_status": {row[0].value: row[1] for row in status_rows},
        "by_country": {row[0] or "unknown": row[1] for row in country_rows},
    }
