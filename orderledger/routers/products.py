from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from orderledger.core.constants import MAX_ROW_ID
from orderledger.dependencies import get_db, require_auth
from orderledger.schemas.common import ErrorResponse
from orderledger.schemas.product import ProductRead, StockAdjustment
from orderledger.services import adjust_stock
from orderledger.services.stock_ledger import get_product

ProductId = Annotated[int, Path(gt=0, le=MAX_ROW_ID)]

router = APIRouter(
    prefix="/products",
    tags=["Products"],
    dependencies=[Depends(require_auth)],
    responses={404: {"model": ErrorResponse}},
)


@router.get("/{product_id}", response_model=ProductRead)
def read_product(product_id: ProductId, db: Session = Depends(get_db)):
    return get_product(db, product_id)


@router.post(
    "/{product_id}/stock",
    response_model=ProductRead,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def update_stock(product_id: ProductId, payload: StockAdjustment, db: Session = Depends(get_db)):
    return adjust_stock(
        db,
        product_id,
        increase=payload.increase,
        decrease=payload.decrease,
    )


__all__ = ["router"]
