from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String

from orderledger.database.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    sku = Column(String, nullable=False, unique=True)
    price = Column(Numeric(12, 2), nullable=False, default=0)

    # Ledger counters; written only by orderledger.services.stock_ledger.
    current_stock = Column(Integer, nullable=False, default=0)
    total_in = Column(Integer, nullable=False, default=0)
    total_out = Column(Integer, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="ck_products_current_stock_non_negative"),
        CheckConstraint("total_in >= 0", name="ck_products_total_in_non_negative"),
        CheckConstraint("total_out >= 0", name="ck_products_total_out_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )


__all__ = ["Product"]
