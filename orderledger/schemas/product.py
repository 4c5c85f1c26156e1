from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from orderledger.core.constants import MAX_QUANTITY
from orderledger.schemas.common import ORMModel, TimestampedRead


class ProductSummary(ORMModel):
    id: int
    sku: str


class ProductRead(TimestampedRead):
    id: int
    sku: str
    price: Decimal
    current_stock: int
    total_in: int
    total_out: int


class StockAdjustment(BaseModel):
    increase: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY, description="Units received (stock-in)")
    decrease: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY, description="Units removed (stock-out)")
