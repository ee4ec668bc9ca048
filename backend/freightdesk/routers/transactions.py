"""Wallet ledger API."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..auth import Actor, get_current_actor, require_role
from ..database import get_db
from ..errors import AuthorizationError, ValidationError
from ..services.ledger import LedgerService
from ..statuses import Currency, Role, TransactionType

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post("/", response_model=schemas.TransactionOut, status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: schemas.TransactionCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    require_role(actor, [Role.ADMIN, Role.PURCHASE_OFFICER])
    return LedgerService(db).create_transaction(
        customer_id=payload.customer_id,
        tx_type=payload.type,
        amount=payload.amount,
        currency=payload.currency,
        actor_id=actor.actor_id,
        notes=payload.notes,
    )


@router.get("/", response_model=List[schemas.TransactionOut])
def list_transactions(
    customer_id: Optional[int] = Query(None, alias="customerId"),
    currency: Optional[Currency] = Query(None),
    tx_type: Optional[TransactionType] = Query(None, alias="type"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    if customer_id is None:
        raise ValidationError("customerId is required")
    if actor.is_customer and customer_id != actor.customer_id:
        raise AuthorizationError("Unauthorized")
    return LedgerService(db).list_transactions(
        customer_id,
        currency=currency,
        tx_type=tx_type,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
