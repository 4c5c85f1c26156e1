from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, cast

from sqlalchemy import select
from sqlalchemy.orm import Session

from orderledger.core.constants import MAX_QUANTITY, MAX_ROW_ID, ORDER_STATUSES
from orderledger.core.errors import (
    CustomerNotFoundError,
    EmptyItemsError,
    OrderNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from orderledger.models.customer import Customer
from orderledger.models.order import Order
from orderledger.models.product import Product


@dataclass(frozen=True)
class OrderLine:
    product_id: int
    quantity: int


def _field(item: Any, name: str):
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _require_id(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError("{} must be a positive integer.".format(field), **{field: value})
    if value > MAX_ROW_ID:
        raise ValidationError("{} is out of range.".format(field), **{field: value})
    return value


def normalize_items(items: Optional[Iterable[Any]]) -> list[OrderLine]:
    """Turn request items (mappings or objects) into validated order lines."""
    lines = []
    for index, item in enumerate(items or ()):
        product_id = _require_id(_field(item, "product_id"), "product_id")
        quantity = _field(item, "quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError(
                "Item {} quantity must be a positive integer.".format(index + 1),
                product_id=product_id,
                quantity=quantity,
            )
        if quantity > MAX_QUANTITY:
            raise ValidationError(
                "Item {} quantity is too large.".format(index + 1),
                product_id=product_id,
                quantity=quantity,
                limit=MAX_QUANTITY,
            )
        lines.append(OrderLine(product_id=product_id, quantity=quantity))
    if not lines:
        raise EmptyItemsError()
    return lines


def normalize_note(note: Optional[str]) -> Optional[str]:
    if note is None:
        return None
    note = note.strip()
    return note or None


def requested_quantities(lines: Iterable[OrderLine]) -> dict[int, int]:
    """Sum requested quantities per product, in first-seen order."""
    totals: dict[int, int] = OrderedDict()
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
    return totals


def load_customer(db: Session, customer_id: int) -> Customer:
    customer = db.get(Customer, _require_id(customer_id, "customer_id"))
    if customer is None:
        raise CustomerNotFoundError(customer_id)
    return customer


def load_products(db: Session, product_ids: Iterable[int]) -> dict[int, Product]:
    """Batch-load products; raises for the first id that does not exist."""
    ids = list(OrderedDict.fromkeys(product_ids))
    rows = db.execute(select(Product).where(Product.id.in_(ids))).scalars().all()
    products = {product.id: product for product in rows}
    for product_id in ids:
        if product_id not in products:
            raise ProductNotFoundError(product_id)
    return products


def load_order(db: Session, order_id: int, *, for_update: bool = False) -> Order:
    stmt = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
    if for_update:
        stmt = stmt.with_for_update(of=Order)
    order = db.execute(stmt).unique().scalars().first()
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


def current_status(db: Session, order_id: int) -> Optional[str]:
    return db.execute(select(Order.status).where(Order.id == order_id)).scalar_one_or_none()


def get_order(db: Session, order_id: int) -> Order:
    return load_order(db, order_id)


def list_orders(
    db: Session,
    customer_id: Optional[int] = None,
    status: Optional[str] = None,
) -> list[Order]:
    """Orders newest first, optionally for one customer and/or one status."""
    if status is not None and status not in ORDER_STATUSES:
        raise ValidationError("Unknown order status.", status=status)
    stmt = select(Order)
    if customer_id is not None:
        stmt = stmt.where(Order.customer_id == customer_id)
    if status is not None:
        stmt = stmt.where(Order.status == status)
    stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc())
    return cast(list[Order], list(db.execute(stmt).unique().scalars().all()))


__all__ = [
    "OrderLine",
    "current_status",
    "get_order",
    "list_orders",
    "load_customer",
    "load_order",
    "load_products",
    "normalize_items",
    "normalize_note",
    "requested_quantities",
]
