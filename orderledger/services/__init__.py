from orderledger.services.order_queries import get_order, list_orders
from orderledger.services.order_service import cancel_order, confirm_order, create_order, delete_order
from orderledger.services.purchase_records import list_purchase_records
from orderledger.services.stock_ledger import adjust_stock

__all__ = [
    "adjust_stock",
    "cancel_order",
    "confirm_order",
    "create_order",
    "delete_order",
    "get_order",
    "list_orders",
    "list_purchase_records",
]
