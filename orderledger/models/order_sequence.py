from sqlalchemy import Column, Integer, String

from orderledger.database.base import Base


class OrderNumberSequence(Base):
    __tablename__ = "order_number_sequences"

    name = Column(String(40), primary_key=True)
    value = Column(Integer, nullable=False, default=0)


__all__ = ["OrderNumberSequence"]
