"""Customer accounts, wallet view and push-token registration."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import models, schemas
from ..auth import Actor, get_current_actor, require_role
from ..database import get_db
from ..errors import AuthorizationError, NotFoundError
from ..services.ledger import get_balance
from ..services.repository import unit_of_work
from ..statuses import CURRENCY_SYMBOLS, Role

router = APIRouter(tags=["Customers"])


def _get_customer(db: Session, customer_id: int) -> models.Customer:
    customer = db.get(models.Customer, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    return customer


@router.post("/customers/", response_model=schemas.CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: schemas.CustomerCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    require_role(actor, [Role.ADMIN, Role.PURCHASE_OFFICER])
    customer = models.Customer(**payload.model_dump(), push_tokens=[])
    with unit_of_work(db, "رمز العميل مستخدم بالفعل"):
        db.add(customer)
    db.refresh(customer)
    return customer


@router.get("/customers/{customer_id}", response_model=schemas.CustomerOut)
def get_customer(customer_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    if actor.is_customer and actor.customer_id != customer_id:
        raise AuthorizationError("Unauthorized")
    return _get_customer(db, customer_id)


@router.post("/customers/{customer_id}/push-tokens", status_code=status.HTTP_204_NO_CONTENT)
def register_push_token(
    customer_id: int,
    payload: schemas.PushTokenIn,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    if actor.customer_id != customer_id and actor.role != Role.ADMIN.value:
        raise AuthorizationError("Unauthorized")
    customer = _get_customer(db, customer_id)
    if payload.token not in (customer.push_tokens or []):
        with unit_of_work(db):
            # Reassign rather than append so the JSON column is flagged dirty
            customer.push_tokens = [*(customer.push_tokens or []), payload.token]


@router.get("/wallet", response_model=schemas.WalletOut)
def get_wallet(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    if not actor.is_customer:
        raise AuthorizationError("Only customers can access this endpoint")
    if actor.customer_id is None:
        raise NotFoundError("Customer account not found")
    customer = _get_customer(db, actor.customer_id)
    return schemas.WalletOut(
        customer_id=customer.id,
        customer_name=customer.name,
        customer_code=customer.code,
        wallets={
            currency.value: schemas.WalletBalance(
                currency=currency,
                balance=get_balance(customer, currency),
                symbol=symbol,
            )
            for currency, symbol in CURRENCY_SYMBOLS.items()
        },
    )
