# services/exceptions.py
"""
Errors raised by the inventory services.

Every error carries a stable `kind` (the name the API reports) and a
human-readable message. Bad-input errors also subclass ValueError.
PersistenceFailure and ConcurrencyConflict are transient; the ledger
retries them before letting them reach the caller.
"""


class InventoryError(Exception):
     """Base class for inventory ledger errors."""

     kind = "InventoryError"
     retryable = False

     def __init__(self, message: str):
          super().__init__(message)
          self.message = message

     def to_dict(self) -> dict:
          return {"kind": self.kind, "message": self.message}


class ProductNotFound(InventoryError, ValueError):
     kind = "ProductNotFound"

     def __init__(self, product_id):
          super().__init__(f"Product with ID {product_id} not found")
          self.product_id = product_id


class TransactionNotFound(InventoryError, ValueError):
     kind = "TransactionNotFound"

     def __init__(self, transaction_id):
          super().__init__(f"Inventory transaction with ID {transaction_id} not found")
          self.transaction_id = transaction_id


class InvalidQuantity(InventoryError, ValueError):
     kind = "InvalidQuantity"


class InvalidReason(InventoryError, ValueError):
     kind = "InvalidReason"


class InsufficientStock(InventoryError, ValueError):
     kind = "InsufficientStock"

     def __init__(self, product_id, requested: int, available: int):
          super().__init__(
               f"Cannot remove {requested} units from product {product_id}: "
               f"only {available} in stock"
          )
          self.product_id = product_id
          self.requested = requested
          self.available = available


class PersistenceFailure(InventoryError):
     kind = "PersistenceFailure"
     retryable = True


class ConcurrencyConflict(InventoryError):
     kind = "ConcurrencyConflict"
     retryable = True
