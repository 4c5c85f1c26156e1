from datetime import datetime
from decimal import Decimal

from pydantic import field_validator

from orderledger.core.dates import ensure_utc
from orderledger.schemas.common import ORMModel


class PurchaseRecordRead(ORMModel):
    id: int
    customer_id: int
    product_id: int
    order_id: int
    order_item_id: int
    quantity: int
    price: Decimal
    total_amount: Decimal
    purchase_date: datetime

    @field_validator("purchase_date")
    @classmethod
    def _as_utc(cls, value):
        return ensure_utc(value)
