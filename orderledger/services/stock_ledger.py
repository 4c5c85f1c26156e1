"""Per-product stock counters: current, cumulative-in and cumulative-out.

Nothing here commits. Callers run these functions inside the transaction of
the order-state change (or stock adjustment) they belong to, see
``orderledger.database.transaction``.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from orderledger.core.constants import MAX_QUANTITY
from orderledger.core.dates import utc_now
from orderledger.core.errors import (
    InsufficientStockError,
    NoAmountGivenError,
    ProductNotFoundError,
    ValidationError,
)
from orderledger.database.session import transaction
from orderledger.models.product import Product

logger = logging.getLogger(__name__)


def _require_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("Quantity must be an integer.", quantity=quantity)
    if quantity <= 0:
        raise ValidationError("Quantity must be positive.", quantity=quantity)
    if quantity > MAX_QUANTITY:
        raise ValidationError("Quantity is too large.", quantity=quantity, limit=MAX_QUANTITY)
    return quantity


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def lock_products(db: Session, product_ids: Iterable[int]) -> dict[int, Product]:
    """Lock product rows ``FOR UPDATE`` in ascending id order.

    A fixed lock order keeps two confirms touching the same products from
    deadlocking each other.
    """
    ids = sorted(set(product_ids))
    if not ids:
        return {}
    rows = (
        db.execute(
            select(Product)
            .where(Product.id.in_(ids))
            .order_by(Product.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        .scalars()
        .all()
    )
    return {product.id: product for product in rows}


def can_decrement(db: Session, product_id: int, quantity: int) -> bool:
    quantity = _require_quantity(quantity)
    current = db.execute(
        select(Product.current_stock).where(Product.id == product_id)
    ).scalar_one_or_none()
    if current is None:
        raise ProductNotFoundError(product_id)
    return current >= quantity


def _apply(db: Session, product_id: int, stmt) -> Optional[Product]:
    result = db.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount != 1:
        return None
    return db.get(Product, product_id, populate_existing=True)


def decrement(db: Session, product_id: int, quantity: int) -> Product:
    """Consume ``quantity`` units: current_stock -= quantity, total_out += quantity.

    The sufficiency check and the write are one conditional UPDATE, so stock
    cannot go negative whatever the isolation level.
    """
    quantity = _require_quantity(quantity)
    stmt = (
        update(Product)
        .where(Product.id == product_id, Product.current_stock >= quantity)
        .values(
            current_stock=Product.current_stock - quantity,
            total_out=Product.total_out + quantity,
            updated_at=utc_now(),
        )
    )
    product = _apply(db, product_id, stmt)
    if product is None:
        existing = db.get(Product, product_id, populate_existing=True)
        if existing is None:
            raise ProductNotFoundError(product_id)
        logger.warning(
            "Stock decrement rejected.",
            extra={"product_id": product_id, "quantity": quantity},
        )
        raise InsufficientStockError(
            product_id,
            requested=quantity,
            available=existing.current_stock,
            sku=existing.sku,
        )
    return product


def increment(db: Session, product_id: int, quantity: int) -> Product:
    """Stock-in: current_stock += quantity, total_in += quantity."""
    quantity = _require_quantity(quantity)
    stmt = (
        update(Product)
        .where(Product.id == product_id)
        .values(
            current_stock=Product.current_stock + quantity,
            total_in=Product.total_in + quantity,
            updated_at=utc_now(),
        )
    )
    product = _apply(db, product_id, stmt)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def restore(db: Session, product_id: int, quantity: int) -> Product:
    """Undo a prior decrement: current_stock += quantity, total_out -= quantity."""
    quantity = _require_quantity(quantity)
    stmt = (
        update(Product)
        .where(Product.id == product_id)
        .values(
            current_stock=Product.current_stock + quantity,
            total_out=Product.total_out - quantity,
            updated_at=utc_now(),
        )
    )
    product = _apply(db, product_id, stmt)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def _optional_amount(value, field: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("{} must be an integer.".format(field), **{field: value})
    if value < 0:
        raise ValidationError("{} must not be negative.".format(field), **{field: value})
    if value > MAX_QUANTITY:
        raise ValidationError("{} is too large.".format(field), limit=MAX_QUANTITY, **{field: value})
    return value or None


def adjust_stock(
    db: Session,
    product_id: int,
    *,
    increase: Optional[int] = None,
    decrease: Optional[int] = None,
) -> Product:
    """Manual stock adjustment, applied atomically.

    ``increase`` is booked as stock-in and ``decrease`` as stock-out; when both
    are given the increase is applied first.
    """
    increase = _optional_amount(increase, "increase")
    decrease = _optional_amount(decrease, "decrease")
    if increase is None and decrease is None:
        raise NoAmountGivenError()

    with transaction(db):
        lock_products(db, [product_id])
        product = get_product(db, product_id)
        if increase:
            product = increment(db, product_id, increase)
        if decrease:
            product = decrement(db, product_id, decrease)

    logger.info(
        "Stock adjusted: +%s -%s, now %s.",
        increase or 0,
        decrease or 0,
        product.current_stock,
        extra={"product_id": product_id},
    )
    return product


__all__ = [
    "adjust_stock",
    "can_decrement",
    "decrement",
    "get_product",
    "increment",
    "lock_products",
    "restore",
]
