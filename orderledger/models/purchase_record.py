from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric

from orderledger.database.base import Base


class PurchaseRecord(Base):
    __tablename__ = "purchase_records"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    # Provenance of the confirming order. Plain columns, not foreign keys, so
    # deleting the order leaves the record untouched.
    order_id = Column(Integer, nullable=False)
    order_item_id = Column(Integer, nullable=False, unique=True)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)

    purchase_date = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_purchase_records_customer_date", "customer_id", "purchase_date"),
        Index("idx_purchase_records_order", "order_id"),
    )


__all__ = ["PurchaseRecord"]
