"""Order API: creation, listing, detail and the status/field PATCH."""

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..auth import Actor, get_current_actor, require_role
from ..database import get_db
from ..errors import AuthorizationError, NotFoundError
from ..services.analytics import order_summary
from ..services.notifications import NotificationSink, build_status_notification, dispatch, get_notification_sink
from ..services.repository import OrderRepository
from ..services.state_machine import OrderStateMachine
from ..statuses import OrderStatus, Role

router = APIRouter(prefix="/orders", tags=["Orders"])


def _ensure_can_read(actor: Actor, order: models.Order) -> None:
    if actor.is_customer and order.customer_id != actor.customer_id:
        raise AuthorizationError("Unauthorized")


@router.get("/", response_model=schemas.PaginatedOrders)
def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    customer_id: Optional[int] = Query(None),
    limit: int = Query(20, ge=10, le=50),
    cursor: Optional[int] = Query(None, description="Return orders with an id below this one"),
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    stmt = select(models.Order).options(selectinload(models.Order.customer))

    if actor.is_customer:
        stmt = stmt.where(models.Order.customer_id == actor.customer_id)
    elif customer_id is not None:
        stmt = stmt.where(models.Order.customer_id == customer_id)
    if status_filter:
        stmt = stmt.where(models.Order.status == status_filter)
    if cursor is not None:
        stmt = stmt.where(models.Order.id < cursor)

    items = db.scalars(stmt.order_by(models.Order.id.desc()).limit(limit)).all()
    next_cursor = items[-1].id if len(items) == limit else None
    return schemas.PaginatedOrders(
        data=items,
        meta=schemas.PaginationMeta(count=len(items), next_cursor=next_cursor),
    )


@router.post("/", response_model=schemas.OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: schemas.OrderCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    require_role(actor, [Role.ADMIN, Role.PURCHASE_OFFICER])
    repository = OrderRepository(db)

    if payload.customer_id is not None and db.get(models.Customer, payload.customer_id) is None:
        raise NotFoundError("Customer not found")

    with repository.unit_of_work():
        order = repository.add(models.Order(**payload.model_dump(), status=OrderStatus.PURCHASED))
    return repository.get_order(order.id)


@router.get("/stats", response_model=schemas.OrderStats)
def order_stats(actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    if actor.is_customer:
        # A customer account without a linked customer sees nothing
        return order_summary(db, customer_id=actor.customer_id if actor.customer_id is not None else -1)
    return order_summary(db)


@router.get("/{order_id}", response_model=schemas.OrderOut)
def get_order(order_id: int, actor: Actor = Depends(get_current_actor), db: Session = Depends(get_db)):
    order = OrderRepository(db).get_order(order_id)
    if not order:
        raise NotFoundError("Order not found")
    _ensure_can_read(actor, order)
    return order


@router.patch("/{order_id}", response_model=schemas.OrderOut)
def update_order(
    order_id: int,
    payload: schemas.OrderUpdate,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
):
    outcome = OrderStateMachine(db).apply(
        order_id,
        payload.changes(),
        actor,
        expected_version=payload.version,
    )

    if outcome.status_changed:
        notification = build_status_notification(outcome.order)
        if notification is not None:
            background_tasks.add_task(dispatch, sink, notification)
    return outcome.order
