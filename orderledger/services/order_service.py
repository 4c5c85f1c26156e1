"""Order lifecycle: create, confirm, cancel and delete.

``pending`` is the initial state; ``confirmed`` and ``cancelled`` are
terminal. Each transition is one database transaction; on any failure the
transaction is rolled back and nothing of it is visible.

Stock is consumed only by ``confirm_order``. ``create_order`` checks
availability at read time without reserving anything, so two pending orders
can compete for the same units and only the confirm that comes first wins.
"""

import logging
from typing import Any, Iterable, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from orderledger.core.constants import (
    ORDER_STATUS_CANCELLED,
    ORDER_STATUS_CONFIRMED,
    ORDER_STATUS_PENDING,
)
from orderledger.core.dates import utc_now
from orderledger.core.errors import (
    InsufficientStockError,
    OrderLedgerError,
    OrderNotFoundError,
    StateConflictError,
)
from orderledger.core.money import line_total, to_money
from orderledger.database.session import transaction
from orderledger.models.order import Order, OrderItem
from orderledger.services import stock_ledger
from orderledger.services.order_numbers import next_order_number
from orderledger.services.order_queries import (
    current_status,
    load_customer,
    load_order,
    load_products,
    normalize_items,
    normalize_note,
    requested_quantities,
)
from orderledger.services.purchase_records import record_purchases

logger = logging.getLogger(__name__)


def _log_rejection(action: str, order_id, exc: OrderLedgerError) -> None:
    logger.warning(
        "Order %s rejected: %s",
        action,
        exc.message,
        extra={"order_id": order_id, "error_kind": exc.kind},
    )


def _transition(db: Session, order: Order, target: str, action: str) -> None:
    """Compare-and-set ``order.status`` from pending to ``target``.

    A zero row count means the order left ``pending`` (or disappeared) after
    it was read, e.g. a concurrent confirm won.
    """
    result = db.execute(
        update(Order)
        .where(Order.id == order.id, Order.status == ORDER_STATUS_PENDING)
        .values(status=target, updated_at=utc_now())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        status = current_status(db, order.id)
        if status is None:
            raise OrderNotFoundError(order.id)
        raise StateConflictError(order.id, status, action)
    db.refresh(order, attribute_names=["status", "updated_at"])


def create_order(
    db: Session,
    customer_id: int,
    items: Iterable[Any],
    note: Optional[str] = None,
) -> Order:
    """Create a pending order with prices frozen from the current catalog.

    Raises ``EmptyItemsError``, ``ValidationError``, ``CustomerNotFoundError``,
    ``ProductNotFoundError`` or ``InsufficientStockError``. The stock ledger
    is not touched.
    """
    lines = normalize_items(items)
    note = normalize_note(note)

    try:
        with transaction(db):
            load_customer(db, customer_id)
            products = load_products(db, [line.product_id for line in lines])

            for product_id, quantity in requested_quantities(lines).items():
                product = products[product_id]
                if product.current_stock < quantity:
                    raise InsufficientStockError(
                        product_id,
                        requested=quantity,
                        available=product.current_stock,
                        sku=product.sku,
                    )

            order_items = []
            total_amount = to_money(0)
            for line in lines:
                unit_price = to_money(products[line.product_id].price)
                order_items.append(
                    OrderItem(
                        product_id=line.product_id,
                        quantity=line.quantity,
                        price=unit_price,
                    )
                )
                total_amount += line_total(line.quantity, unit_price)

            order = Order(
                order_number=next_order_number(db),
                customer_id=customer_id,
                status=ORDER_STATUS_PENDING,
                total_amount=to_money(total_amount),
                note=note,
                items=order_items,
            )
            db.add(order)
            db.flush()
    except OrderLedgerError as exc:
        _log_rejection("create", None, exc)
        raise

    logger.info(
        "Order created with %s item(s), total %s.",
        len(order_items),
        order.total_amount,
        extra={
            "order_id": order.id,
            "order_number": order.order_number,
            "customer_id": customer_id,
        },
    )
    return order


def confirm_order(db: Session, order_id: int) -> Order:
    """Confirm a pending order and consume its stock.

    In one transaction: status becomes ``confirmed``, one purchase record is
    appended per item and each item's quantity is decremented from the
    ledger. If any product lacks stock the whole transaction is rolled back,
    the order stays pending and ``InsufficientStockError`` is raised.
    """
    try:
        with transaction(db):
            order = load_order(db, order_id)
            _transition(db, order, ORDER_STATUS_CONFIRMED, "confirm")
            stock_ledger.lock_products(db, [item.product_id for item in order.items])
            record_purchases(db, order)
            for item in order.items:
                stock_ledger.decrement(db, item.product_id, item.quantity)
    except OrderLedgerError as exc:
        _log_rejection("confirm", order_id, exc)
        raise

    logger.info(
        "Order confirmed.",
        extra={"order_id": order.id, "order_number": order.order_number, "status": order.status},
    )
    return order


def cancel_order(db: Session, order_id: int) -> Order:
    """Cancel a pending order. Stock was never consumed, so none is returned."""
    try:
        with transaction(db):
            order = load_order(db, order_id)
            _transition(db, order, ORDER_STATUS_CANCELLED, "cancel")
    except OrderLedgerError as exc:
        _log_rejection("cancel", order_id, exc)
        raise

    logger.info(
        "Order cancelled.",
        extra={"order_id": order.id, "order_number": order.order_number, "status": order.status},
    )
    return order


def delete_order(db: Session, order_id: int) -> None:
    """Delete an order aggregate in any status.

    Stock is restored (current_stock += quantity, total_out -= quantity) only
    when the order was confirmed, since pending and cancelled orders never
    consumed any. Items go with the order; purchase records stay as they
    were written.
    """
    try:
        with transaction(db):
            order = load_order(db, order_id, for_update=True)
            restored = order.status == ORDER_STATUS_CONFIRMED
            if restored:
                stock_ledger.lock_products(db, [item.product_id for item in order.items])
                for item in order.items:
                    stock_ledger.restore(db, item.product_id, item.quantity)
            order_number = order.order_number
            db.delete(order)
            db.flush()
    except OrderLedgerError as exc:
        _log_rejection("delete", order_id, exc)
        raise

    logger.info(
        "Order deleted%s.",
        " and stock restored" if restored else "",
        extra={"order_id": order_id, "order_number": order_number},
    )


__all__ = ["cancel_order", "confirm_order", "create_order", "delete_order"]
