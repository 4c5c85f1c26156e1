import logging
from datetime import datetime
from typing import Optional, cast

from sqlalchemy import select
from sqlalchemy.orm import Session

from orderledger.core.dates import ensure_utc, utc_now
from orderledger.core.money import line_total, to_money
from orderledger.models.order import Order
from orderledger.models.purchase_record import PurchaseRecord

logger = logging.getLogger(__name__)


def record_purchases(
    db: Session,
    order: Order,
    *,
    purchased_at: Optional[datetime] = None,
) -> list[PurchaseRecord]:
    """Append one purchase record per order item.

    Called only while confirming ``order``. The unique ``order_item_id`` column
    rejects a second record for the same item.
    """
    purchased_at = ensure_utc(purchased_at) or utc_now()
    records = [
        PurchaseRecord(
            customer_id=order.customer_id,
            product_id=item.product_id,
            order_id=order.id,
            order_item_id=item.id,
            quantity=item.quantity,
            price=to_money(item.price),
            total_amount=line_total(item.quantity, item.price),
            purchase_date=purchased_at,
        )
        for item in order.items
    ]
    db.add_all(records)
    db.flush()
    logger.info(
        "Recorded %s purchase(s).",
        len(records),
        extra={"order_id": order.id, "customer_id": order.customer_id},
    )
    return records


def list_purchase_records(db: Session, customer_id: Optional[int] = None) -> list[PurchaseRecord]:
    stmt = select(PurchaseRecord)
    if customer_id is not None:
        stmt = stmt.where(PurchaseRecord.customer_id == customer_id)
    stmt = stmt.order_by(PurchaseRecord.purchase_date.desc(), PurchaseRecord.id.desc())
    return cast(list[PurchaseRecord], list(db.execute(stmt).scalars().all()))


__all__ = ["list_purchase_records", "record_purchases"]
