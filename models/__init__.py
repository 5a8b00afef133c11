from .base import Base
from .product import Product
from .inventory_transaction import (
     InventoryTransaction,
     LedgerImmutableError,
     TransactionType,
)

__all__ = [
     "Base",
     "Product",
     "InventoryTransaction",
     "LedgerImmutableError",
     "TransactionType",
]
