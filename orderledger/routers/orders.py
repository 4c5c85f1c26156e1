from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.orm import Session

from orderledger.core.constants import MAX_ROW_ID
from orderledger.dependencies import get_db, require_auth
from orderledger.schemas.common import ErrorResponse
from orderledger.schemas.order import OrderCreate, OrderRead, OrderStatus
from orderledger.services import (
    cancel_order,
    confirm_order,
    create_order,
    delete_order,
    get_order,
    list_orders,
)

STOCK_CHANGED_HEADER = "X-Product-Data-Updated"

OrderId = Annotated[int, Path(gt=0, le=MAX_ROW_ID)]

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
    dependencies=[Depends(require_auth)],
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)


@router.get("", response_model=List[OrderRead])
def read_orders(
    customer_id: Optional[int] = Query(None, gt=0, le=MAX_ROW_ID, description="Only orders of this customer"),
    status: Optional[OrderStatus] = Query(None, description="pending | confirmed | cancelled"),
    db: Session = Depends(get_db),
):
    return list_orders(db, customer_id=customer_id, status=status)


@router.post("", response_model=OrderRead, status_code=201, responses={400: {"model": ErrorResponse}})
def submit_order(payload: OrderCreate, db: Session = Depends(get_db)):
    return create_order(db, payload.customer_id, payload.items, note=payload.note)


@router.get("/{order_id}", response_model=OrderRead)
def read_order(order_id: OrderId, db: Session = Depends(get_db)):
    return get_order(db, order_id)


@router.post("/{order_id}/confirm", response_model=OrderRead)
def confirm(order_id: OrderId, response: Response, db: Session = Depends(get_db)):
    order = confirm_order(db, order_id)
    response.headers[STOCK_CHANGED_HEADER] = "true"
    return order


@router.post("/{order_id}/cancel", response_model=OrderRead)
def cancel(order_id: OrderId, db: Session = Depends(get_db)):
    return cancel_order(db, order_id)


@router.delete("/{order_id}")
def remove_order(order_id: OrderId, response: Response, db: Session = Depends(get_db)):
    delete_order(db, order_id)
    response.headers[STOCK_CHANGED_HEADER] = "true"
    return {"status": "deleted", "order_id": order_id}


__all__ = ["router"]
