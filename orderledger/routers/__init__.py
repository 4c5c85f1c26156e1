from orderledger.routers.orders import router as orders_router
from orderledger.routers.products import router as products_router
from orderledger.routers.purchases import router as purchases_router

__all__ = [
    "orders_router",
    "products_router",
    "purchases_router",
]
