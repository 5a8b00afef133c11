# services/stock_ledger.py
"""
Stock Ledger - the only writer of products.stock.

Every stock change is recorded as an immutable InventoryTransaction that
snapshots the stock before and after the change:
1. Validate quantity and reason (no storage access on bad input)
2. Take the per-product lock, read the product row (SELECT ... FOR UPDATE)
3. Insert the transaction and update products.stock in one DB transaction
4. After the commit, notify subscribers with a stock_changed event

Commands for the same product are serialised by the lock, so each one sees
the stock left by the previous one and the previous_stock/new_stock values
of a product's transactions form an unbroken chain. The product mapper's
version counter catches writers outside this process; those conflicts and
transient database errors are retried a bounded number of times.
"""
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.exc import StaleDataError

import config
from models import InventoryTransaction, Product, TransactionType
from services.exceptions import (
     ConcurrencyConflict,
     InsufficientStock,
     InvalidQuantity,
     InvalidReason,
     InventoryError,
     PersistenceFailure,
     ProductNotFound,
)

logger = logging.getLogger(__name__)

# Suggested reasons shown by the admin console. Not enforced: any
# non-empty reason is accepted.
COMMON_REASONS = [
     "New shipment arrived",
     "Supplier delivery",
     "Stock correction",
     "Returned goods",
     "Inventory audit adjustment",
     "Damaged goods",
     "Reorder",
     "Other",
]

MAX_REASON_LENGTH = 255


@dataclass(frozen=True)
class StockAdjustment:
     """Result of a committed add/remove command."""
     transaction: InventoryTransaction
     product_id: int
     product_name: str
     previous_stock: int
     quantity: int
     new_stock: int


class ProductLocks:
     """
     One lock per product id; different products never share a lock.

     Entries are reference counted and dropped once no caller holds or waits
     on them, so the registry only tracks products with a command in flight.
     """

     def __init__(self):
          self._locks: dict = {}
          self._guard = threading.Lock()

     def __len__(self) -> int:
          with self._guard:
               return len(self._locks)

     @contextmanager
     def for_product(self, product_id):
          with self._guard:
               entry = self._locks.get(product_id)
               if entry is None:
                    entry = self._locks[product_id] = [threading.Lock(), 0]
               entry[1] += 1
          try:
               with entry[0]:
                    yield
          finally:
               with self._guard:
                    entry[1] -= 1
                    if entry[1] == 0:
                         del self._locks[product_id]


_default_locks = ProductLocks()


def _validate_quantity(quantity) -> int:
     # bool is an int subclass; True must not count as 1 unit
     if isinstance(quantity, bool) or not isinstance(quantity, int):
          raise InvalidQuantity(f"Quantity must be a whole number, got {quantity!r}")
     if quantity <= 0:
          raise InvalidQuantity(f"Quantity must be greater than 0, got {quantity}")
     return quantity


def _validate_reason(reason) -> str:
     if not isinstance(reason, str) or not reason.strip():
          raise InvalidReason("Reason is required")
     reason = reason.strip()
     if len(reason) > MAX_REASON_LENGTH:
          raise InvalidReason(f"Reason must be at most {MAX_REASON_LENGTH} characters")
     return reason


def _clean_notes(notes: Optional[str]) -> Optional[str]:
     if notes is None:
          return None
     notes = notes.strip()
     return notes or None


class StockLedger:
     """
     Applies stock adjustments atomically and records them.

     Args:
          session_factory: sessionmaker producing sessions with expire_on_commit=False
          event_bus: Optional EventBus receiving stock_changed after each commit
          locks: Per-product lock registry (shared process-wide by default)
          max_retries: Commit attempts before a transient error reaches the caller
          retry_backoff: Seconds to wait per attempt number between retries
     """

     def __init__(
          self,
          session_factory: sessionmaker,
          event_bus=None,
          *,
          locks: Optional[ProductLocks] = None,
          max_retries: Optional[int] = None,
          retry_backoff: Optional[float] = None,
     ):
          self._session_factory = session_factory
          self._event_bus = event_bus
          self._locks = locks if locks is not None else _default_locks
          self._max_retries = max(1, config.LEDGER_MAX_RETRIES if max_retries is None else max_retries)
          self._retry_backoff = config.LEDGER_RETRY_BACKOFF if retry_backoff is None else retry_backoff

     def add_stock(
          self,
          product_id: int,
          quantity: int,
          reason: str,
          notes: Optional[str] = None,
          performed_by: Optional[str] = None
     ) -> StockAdjustment:
          """
          Add stock to a product.

          Returns:
               StockAdjustment with the persisted transaction

          Raises:
               InvalidQuantity, InvalidReason, ProductNotFound,
               PersistenceFailure, ConcurrencyConflict
          """
          return self._adjust(TransactionType.ADD, product_id, quantity, reason, notes, performed_by)

     def remove_stock(
          self,
          product_id: int,
          quantity: int,
          reason: str,
          notes: Optional[str] = None,
          performed_by: Optional[str] = None
     ) -> StockAdjustment:
          """
          Remove stock from a product. Fails with InsufficientStock rather
          than letting stock go below zero.

          Returns:
               StockAdjustment with the persisted transaction

          Raises:
               InvalidQuantity, InvalidReason, ProductNotFound, InsufficientStock,
               PersistenceFailure, ConcurrencyConflict
          """
          return self._adjust(TransactionType.REMOVE, product_id, quantity, reason, notes, performed_by)

     def _adjust(
          self,
          type_: TransactionType,
          product_id: int,
          quantity,
          reason,
          notes: Optional[str],
          performed_by: Optional[str]
     ) -> StockAdjustment:
          quantity = _validate_quantity(quantity)
          reason = _validate_reason(reason)
          notes = _clean_notes(notes)
          if performed_by is not None:
               performed_by = str(performed_by)

          with self._locks.for_product(product_id):
               attempt = 1
               while True:
                    try:
                         adjustment = self._commit(type_, product_id, quantity, reason, notes, performed_by)
                         break
                    except (ConcurrencyConflict, PersistenceFailure) as exc:
                         if attempt >= self._max_retries:
                              logger.error(
                                   "Stock %s for product %s failed after %d attempts: %s",
                                   type_.value, product_id, attempt, exc.message,
                              )
                              raise
                         logger.warning(
                              "Stock %s for product %s hit %s (attempt %d/%d), retrying",
                              type_.value, product_id, exc.kind, attempt, self._max_retries,
                         )
                         time.sleep(self._retry_backoff * attempt)
                         attempt += 1
                    except InventoryError as exc:
                         logger.info("Stock %s for product %s rejected: %s", type_.value, product_id, exc.message)
                         raise

          logger.info(
               "Stock %s committed: product=%s qty=%d %d->%d tx=%s",
               type_.value, product_id, quantity,
               adjustment.previous_stock, adjustment.new_stock, adjustment.transaction.id,
          )
          self._notify(adjustment)
          return adjustment

     def _commit(
          self,
          type_: TransactionType,
          product_id: int,
          quantity: int,
          reason: str,
          notes: Optional[str],
          performed_by: Optional[str]
     ) -> StockAdjustment:
          """Read, check and write in a single database transaction."""
          session = self._session_factory()
          try:
               product = (
                    session.query(Product)
                    .filter(Product.id == product_id)
                    .with_for_update()
                    .first()
               )
               if product is None:
                    raise ProductNotFound(product_id)

               previous_stock = product.stock
               if type_ == TransactionType.ADD:
                    new_stock = previous_stock + quantity
               else:
                    if quantity > previous_stock:
                         raise InsufficientStock(product_id, quantity, previous_stock)
                    new_stock = previous_stock - quantity

               transaction = InventoryTransaction(
                    product_id=product.id,
                    product_name=product.name,
                    type=type_,
                    quantity=quantity,
                    previous_stock=previous_stock,
                    new_stock=new_stock,
                    reason=reason,
                    notes=notes,
                    performed_by=performed_by,
               )
               session.add(transaction)
               product.stock = new_stock
               session.commit()

               return StockAdjustment(
                    transaction=transaction,
                    product_id=product.id,
                    product_name=product.name,
                    previous_stock=previous_stock,
                    quantity=quantity,
                    new_stock=new_stock,
               )
          except InventoryError:
               session.rollback()
               raise
          except StaleDataError as exc:
               session.rollback()
               raise ConcurrencyConflict(
                    f"Product {product_id} was changed by another writer"
               ) from exc
          except SQLAlchemyError as exc:
               session.rollback()
               raise PersistenceFailure(
                    f"Could not commit stock change for product {product_id}: {exc.__class__.__name__}"
               ) from exc
          finally:
               session.close()

     def _notify(self, adjustment: StockAdjustment) -> None:
          if self._event_bus is None:
               return

          transaction = adjustment.transaction
          payload = {
               "product_id": adjustment.product_id,
               "product_name": adjustment.product_name,
               "transaction_id": transaction.id,
               "type": transaction.type.value,
               "quantity": adjustment.quantity,
               "previous_stock": adjustment.previous_stock,
               "new_stock": adjustment.new_stock,
               "created_at": transaction.created_at.isoformat(),
          }
          try:
               self._event_bus.dispatch("stock_changed", payload)
          except Exception as exc:
               logger.warning("Could not dispatch stock_changed for tx=%s: %s", transaction.id, exc)
