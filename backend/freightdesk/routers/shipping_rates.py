"""Shipping rate catalog API."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import Actor, get_current_actor, require_role
from ..database import get_db
from ..errors import BusinessRuleViolation, NotFoundError
from ..services.repository import unit_of_work
from ..statuses import Role

router = APIRouter(prefix="/shipping-rates", tags=["Shipping Rates"])


def _get_rate(db: Session, rate_id: int) -> models.ShippingRate:
    rate = db.get(models.ShippingRate, rate_id)
    if not rate:
        raise NotFoundError("Shipping rate not found")
    return rate


@router.get("/", response_model=List[schemas.ShippingRateOut])
def list_rates(
    search: Optional[str] = Query(None),
    _actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    stmt = select(models.ShippingRate)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(
                models.ShippingRate.name.ilike(pattern),
                cast(models.ShippingRate.type, String).ilike(pattern),
            )
        )
    return db.scalars(stmt.order_by(models.ShippingRate.created_at.desc(), models.ShippingRate.id.desc())).all()


@router.post("/", response_model=schemas.ShippingRateOut, status_code=status.HTTP_201_CREATED)
def create_rate(
    payload: schemas.ShippingRateCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    require_role(actor, [Role.ADMIN])
    rate = models.ShippingRate(**payload.model_dump())
    with unit_of_work(db):
        db.add(rate)
    db.refresh(rate)
    return rate


@router.put("/{rate_id}", response_model=schemas.ShippingRateOut)
def update_rate(
    rate_id: int,
    payload: schemas.ShippingRateUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    """Orders keep the name/price snapshot they were charged with; edits here only affect new charges."""
    require_role(actor, [Role.ADMIN])
    rate = _get_rate(db, rate_id)
    with unit_of_work(db):
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(rate, field, value)
    db.refresh(rate)
    return rate


@router.delete("/{rate_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rate(
    rate_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    require_role(actor, [Role.ADMIN])
    rate = _get_rate(db, rate_id)
    in_use = db.scalar(
        select(func.count()).select_from(models.Order).where(models.Order.shipping_rate_id == rate_id)
    )
    if in_use:
        raise BusinessRuleViolation("لا يمكن حذف سعر شحن مرتبط بطلبات")
    with unit_of_work(db):
        db.delete(rate)
