from .inventory import router as inventory_router
from .stock_alerts import router as stock_alerts_router

__all__ = [
     "inventory_router",
     "stock_alerts_router",
]
