from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from orderledger.core.constants import MAX_QUANTITY, MAX_ROW_ID
from orderledger.schemas.common import ORMModel, TimestampedRead
from orderledger.schemas.product import ProductSummary

OrderStatus = Literal["pending", "confirmed", "cancelled"]


class OrderItemCreate(BaseModel):
    product_id: int = Field(gt=0, le=MAX_ROW_ID)
    quantity: int = Field(gt=0, le=MAX_QUANTITY)


class OrderCreate(BaseModel):
    customer_id: int = Field(gt=0, le=MAX_ROW_ID)
    # Emptiness is reported by the service as ``empty_items``.
    items: List[OrderItemCreate] = Field(default_factory=list)
    note: Optional[str] = Field(None, max_length=1000)


class CustomerSummary(ORMModel):
    id: int
    name: str
    phone: str


class OrderItemRead(ORMModel):
    id: int
    product_id: int
    quantity: int
    price: Decimal
    product: Optional[ProductSummary] = None


class OrderRead(TimestampedRead):
    id: int
    order_number: int
    customer_id: int
    status: OrderStatus
    total_amount: Decimal
    note: Optional[str] = None
    customer: Optional[CustomerSummary] = None
    items: List[OrderItemRead] = Field(default_factory=list)
