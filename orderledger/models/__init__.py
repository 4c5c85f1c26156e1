import importlib

from orderledger.models.customer import Customer
from orderledger.models.order import Order, OrderItem
from orderledger.models.order_sequence import OrderNumberSequence
from orderledger.models.product import Product
from orderledger.models.purchase_record import PurchaseRecord


def import_all_models() -> None:
    for module_name in (
        "orderledger.models.customer",
        "orderledger.models.order",
        "orderledger.models.order_sequence",
        "orderledger.models.product",
        "orderledger.models.purchase_record",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Customer",
    "Order",
    "OrderItem",
    "OrderNumberSequence",
    "Product",
    "PurchaseRecord",
    "import_all_models",
]
