# services/ledger_queries.py
"""
Read side of the inventory ledger.

Everything here is computed from inventory_transactions at call time; there
are no cached totals that could drift from the committed records.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.orm import Query, Session

from models import InventoryTransaction, Product, TransactionType
from services.exceptions import ProductNotFound, TransactionNotFound

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass
class TransactionFilters:
     """Filters for list_transactions. Dates are inclusive whole days."""
     product_id: Optional[int] = None
     type: Optional[TransactionType] = None
     start_date: Optional[date] = None
     end_date: Optional[date] = None
     page: int = 1
     limit: int = DEFAULT_PAGE_SIZE


def _day_start(day: date) -> datetime:
     if isinstance(day, datetime):
          return day
     return datetime.combine(day, time.min)


def _apply_date_range(
     query: Query,
     start_date: Optional[date],
     end_date: Optional[date]
) -> Query:
     if start_date is not None:
          query = query.filter(InventoryTransaction.created_at >= _day_start(start_date))
     if end_date is not None:
          if isinstance(end_date, datetime):
               query = query.filter(InventoryTransaction.created_at <= end_date)
          else:
               query = query.filter(InventoryTransaction.created_at < _day_start(end_date + timedelta(days=1)))
     return query


def _newest_first(query: Query) -> Query:
     return query.order_by(desc(InventoryTransaction.created_at), desc(InventoryTransaction.id))


def _require_product(db: Session, product_id: int) -> Product:
     product = db.query(Product).filter(Product.id == product_id).first()
     if product is None:
          raise ProductNotFound(product_id)
     return product


def list_by_product(db: Session, product_id: int) -> list[InventoryTransaction]:
     """Full history for one product, most recent first."""
     _require_product(db, product_id)
     query = db.query(InventoryTransaction).filter(InventoryTransaction.product_id == product_id)
     return _newest_first(query).all()


def list_transactions(
     db: Session,
     filters: Optional[TransactionFilters] = None
) -> Tuple[list[InventoryTransaction], int]:
     """
     Paginated transaction list for reporting.

     Returns:
          (transactions on the requested page, total matching count)
     """
     filters = filters or TransactionFilters()
     page = max(1, filters.page)
     limit = min(max(1, filters.limit), MAX_PAGE_SIZE)

     query = db.query(InventoryTransaction)
     if filters.product_id is not None:
          query = query.filter(InventoryTransaction.product_id == filters.product_id)
     if filters.type is not None:
          query = query.filter(InventoryTransaction.type == TransactionType(filters.type))
     query = _apply_date_range(query, filters.start_date, filters.end_date)

     total = query.count()
     transactions = _newest_first(query).offset((page - 1) * limit).limit(limit).all()
     return transactions, total


def aggregate_totals(
     db: Session,
     type: TransactionType,
     start_date: Optional[date] = None,
     end_date: Optional[date] = None,
     product_id: Optional[int] = None
) -> int:
     """Sum of quantities for add or remove transactions matching the filters."""
     query = db.query(func.coalesce(func.sum(InventoryTransaction.quantity), 0)).filter(
          InventoryTransaction.type == TransactionType(type)
     )
     if product_id is not None:
          query = query.filter(InventoryTransaction.product_id == product_id)
     query = _apply_date_range(query, start_date, end_date)
     return int(query.scalar())


def get_transaction(db: Session, transaction_id: int) -> InventoryTransaction:
     """Single transaction by id."""
     transaction = (
          db.query(InventoryTransaction)
          .filter(InventoryTransaction.id == transaction_id)
          .first()
     )
     if transaction is None:
          raise TransactionNotFound(transaction_id)
     return transaction


def verify_product_chain(db: Session, product_id: int) -> Tuple[bool, str, int]:
     """
     Verify a product's ledger from first to last transaction.

     Checks that each transaction's previous_stock equals the new_stock of
     the one before it, that the stored arithmetic holds, and that
     products.stock equals the last new_stock.

     Returns:
          (all_valid: bool, message: str, transactions_checked: int)
     """
     product = _require_product(db, product_id)
     transactions = (
          db.query(InventoryTransaction)
          .filter(InventoryTransaction.product_id == product_id)
          .order_by(InventoryTransaction.id)
          .all()
     )
     if not transactions:
          return True, "Chain is empty (no transactions)", 0

     prev_stock = None
     checked = 0

     for tx in transactions:
          if prev_stock is not None and tx.previous_stock != prev_stock:
               return False, f"Chain broken at id={tx.id}: previous_stock {tx.previous_stock} != {prev_stock}", checked
          expected = (
               tx.previous_stock + tx.quantity
               if tx.type == TransactionType.ADD
               else tx.previous_stock - tx.quantity
          )
          if tx.new_stock != expected:
               return False, f"Arithmetic mismatch at id={tx.id}", checked
          prev_stock = tx.new_stock
          checked += 1

     if product.stock != prev_stock:
          return False, f"Product stock {product.stock} does not match ledger stock {prev_stock}", checked

     return True, "Full chain verification passed", checked
