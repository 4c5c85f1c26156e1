import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from orderledger.core.constants import ORDER_NUMBER_SEQUENCE
from orderledger.models.order import Order
from orderledger.models.order_sequence import OrderNumberSequence

logger = logging.getLogger(__name__)


def _bump(db: Session, name: str):
    result = db.execute(
        update(OrderNumberSequence)
        .where(OrderNumberSequence.name == name)
        .values(value=OrderNumberSequence.value + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return None
    return db.execute(
        select(OrderNumberSequence.value).where(OrderNumberSequence.name == name)
    ).scalar_one()


def _seed(db: Session, name: str) -> int:
    start = db.execute(select(func.coalesce(func.max(Order.order_number), 0))).scalar_one()
    try:
        with db.begin_nested():
            db.add(OrderNumberSequence(name=name, value=start + 1))
    except IntegrityError:
        # Another transaction seeded the row first.
        logger.info("Order number sequence %s seeded concurrently.", name)
        value = _bump(db, name)
        if value is None:
            raise
        return value
    logger.info("Order number sequence %s seeded at %s.", name, start + 1)
    return start + 1


def next_order_number(db: Session, name: str = ORDER_NUMBER_SEQUENCE) -> int:
    """Allocate the next order number inside the caller's transaction.

    The sequence row is incremented in place, which locks it until the
    transaction ends, so concurrent creates are handed distinct, increasing
    numbers. A rolled-back create gives its number back; deleted orders never
    do.
    """
    value = _bump(db, name)
    if value is None:
        value = _seed(db, name)
    return value


__all__ = ["next_order_number"]
