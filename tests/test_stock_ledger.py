"""Tests for StockLedger: add/remove commands, atomicity and the chain invariant."""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import event, text
from sqlalchemy.exc import OperationalError

from models import InventoryTransaction, LedgerImmutableError, TransactionType
from services.exceptions import (
     ConcurrencyConflict,
     InsufficientStock,
     InvalidQuantity,
     InvalidReason,
     PersistenceFailure,
     ProductNotFound,
)
from services.ledger_queries import list_by_product, verify_product_chain
from services.stock_ledger import ProductLocks, StockLedger


def _enter_in_thread(locks, product_id):
     """Start a thread that enters the product's lock; returns (thread, entered event)."""
     entered = threading.Event()

     def enter():
          with locks.for_product(product_id):
               entered.set()

     worker = threading.Thread(target=enter, daemon=True)
     worker.start()
     return worker, entered


def _transactions(session_factory, product_id):
     with session_factory() as session:
          return (
               session.query(InventoryTransaction)
               .filter(InventoryTransaction.product_id == product_id)
               .order_by(InventoryTransaction.id)
               .all()
          )


class TestAddStock:
     def test_shipment_raises_stock(self, ledger, make_product, stock_of):
          product_id = make_product(stock=100)

          result = ledger.add_stock(product_id, 50, "shipment")

          tx = result.transaction
          assert tx.id is not None
          assert tx.created_at is not None
          assert tx.type == TransactionType.ADD
          assert tx.previous_stock == 100
          assert tx.new_stock == 150
          assert tx.quantity == 50
          assert tx.reason == "shipment"
          assert result.previous_stock == 100
          assert result.new_stock == 150
          assert stock_of(product_id) == 150

     def test_records_notes_performer_and_product_name(self, ledger, make_product):
          product_id = make_product(name="Cola 330ml", stock=0)

          tx = ledger.add_stock(product_id, 5, "  Supplier delivery ", notes=" PO-7 ", performed_by=12).transaction

          assert tx.reason == "Supplier delivery"
          assert tx.notes == "PO-7"
          assert tx.performed_by == "12"
          assert tx.product_name == "Cola 330ml"

     def test_blank_notes_stored_as_none(self, ledger, make_product):
          product_id = make_product()
          tx = ledger.add_stock(product_id, 1, "Stock correction", notes="   ").transaction
          assert tx.notes is None

     @pytest.mark.parametrize("quantity", [0, -3, 1.5, "4", True, None])
     def test_rejects_invalid_quantity(self, ledger, make_product, stock_of, session_factory, quantity):
          product_id = make_product(stock=10)

          with pytest.raises(InvalidQuantity):
               ledger.add_stock(product_id, quantity, "shipment")

          assert stock_of(product_id) == 10
          assert _transactions(session_factory, product_id) == []

     @pytest.mark.parametrize("reason", ["", "   ", None, "x" * 256])
     def test_rejects_invalid_reason(self, ledger, make_product, stock_of, reason):
          product_id = make_product(stock=10)

          with pytest.raises(InvalidReason):
               ledger.add_stock(product_id, 5, reason)

          assert stock_of(product_id) == 10

     def test_unknown_product(self, ledger):
          with pytest.raises(ProductNotFound) as exc_info:
               ledger.add_stock(9999, 5, "shipment")
          assert exc_info.value.kind == "ProductNotFound"

     def test_validation_errors_are_value_errors(self, ledger, make_product):
          product_id = make_product()
          with pytest.raises(ValueError):
               ledger.add_stock(product_id, 0, "shipment")


class TestRemoveStock:
     def test_removes_stock(self, ledger, make_product, stock_of):
          product_id = make_product(stock=20)

          result = ledger.remove_stock(product_id, 8, "Damaged goods")

          assert result.transaction.type == TransactionType.REMOVE
          assert result.transaction.previous_stock == 20
          assert result.transaction.new_stock == 12
          assert stock_of(product_id) == 12

     def test_remove_all_stock_reaches_zero(self, ledger, make_product, stock_of):
          product_id = make_product(stock=7)
          ledger.remove_stock(product_id, 7, "Inventory audit adjustment")
          assert stock_of(product_id) == 0

     def test_insufficient_stock_changes_nothing(self, ledger, make_product, stock_of, session_factory, recorder):
          product_id = make_product(stock=10)

          with pytest.raises(InsufficientStock) as exc_info:
               ledger.remove_stock(product_id, 15, "damage")

          assert exc_info.value.requested == 15
          assert exc_info.value.available == 10
          assert stock_of(product_id) == 10
          assert _transactions(session_factory, product_id) == []
          assert recorder.events == []

     def test_unknown_product(self, ledger):
          with pytest.raises(ProductNotFound):
               ledger.remove_stock(424242, 1, "damage")


class TestChain:
     def test_add_then_remove_same_quantity_restores_stock(self, ledger, make_product, stock_of, session_factory):
          product_id = make_product(stock=40)

          ledger.add_stock(product_id, 25, "Returned goods")
          ledger.remove_stock(product_id, 25, "Stock correction")

          assert stock_of(product_id) == 40
          first, second = _transactions(session_factory, product_id)
          assert (first.previous_stock, first.new_stock) == (40, 65)
          assert (second.previous_stock, second.new_stock) == (65, 40)
          assert first.new_stock == second.previous_stock

     def test_stock_matches_latest_transaction(self, ledger, make_product, stock_of, db):
          product_id = make_product(stock=3)
          for quantity in (10, 4, 7):
               ledger.add_stock(product_id, quantity, "shipment")
          ledger.remove_stock(product_id, 6, "damage")

          history = list_by_product(db, product_id)
          assert history[0].new_stock == stock_of(product_id) == 18
          for newer, older in zip(history, history[1:]):
               assert older.new_stock == newer.previous_stock

          assert verify_product_chain(db, product_id) == (True, "Full chain verification passed", 4)


class TestConcurrency:
     def test_thousand_concurrent_single_unit_removals(self, ledger, make_product, stock_of, db):
          product_id = make_product(stock=500)

          def remove_one(_):
               try:
                    ledger.remove_stock(product_id, 1, "Order fulfilment")
                    return "ok"
               except InsufficientStock:
                    return "insufficient"

          with ThreadPoolExecutor(max_workers=8) as pool:
               outcomes = list(pool.map(remove_one, range(1000)))

          assert outcomes.count("ok") == 500
          assert outcomes.count("insufficient") == 500
          assert stock_of(product_id) == 0

          valid, message, checked = verify_product_chain(db, product_id)
          assert valid, message
          assert checked == 500

     def test_concurrent_removals_never_oversell(self, ledger, make_product, stock_of):
          product_id = make_product(stock=10)

          def remove_four(_):
               try:
                    return ledger.remove_stock(product_id, 4, "Order fulfilment")
               except InsufficientStock:
                    return None

          with ThreadPoolExecutor(max_workers=3) as pool:
               results = list(pool.map(remove_four, range(3)))

          assert sum(1 for r in results if r is not None) == 2
          assert stock_of(product_id) == 2

     def test_mixed_concurrent_adds_and_removes_keep_chain(self, ledger, make_product, stock_of, db):
          product_id = make_product(stock=60)

          def work(i):
               if i % 2:
                    ledger.add_stock(product_id, 3, "shipment")
               else:
                    ledger.remove_stock(product_id, 2, "Order fulfilment")

          with ThreadPoolExecutor(max_workers=6) as pool:
               list(pool.map(work, range(60)))

          assert stock_of(product_id) == 60 + 30 * 3 - 30 * 2
          assert verify_product_chain(db, product_id)[0]

     def test_products_use_separate_locks(self):
          locks = ProductLocks()
          with locks.for_product(1):
               other, other_entered = _enter_in_thread(locks, 2)
               same, same_entered = _enter_in_thread(locks, 1)

               assert other_entered.wait(timeout=5)
               assert not same_entered.wait(timeout=0.2)

          assert same_entered.wait(timeout=5)
          other.join(timeout=5)
          same.join(timeout=5)
          assert len(locks) == 0

     def test_lock_registry_stays_empty_after_rejected_commands(self, session_factory, event_bus):
          locks = ProductLocks()
          ledger = StockLedger(session_factory, event_bus, locks=locks, retry_backoff=0)

          for product_id in range(10_000, 10_200):
               with pytest.raises(ProductNotFound):
                    ledger.add_stock(product_id, 1, "shipment")

          assert len(locks) == 0

     def test_lock_registry_released_after_concurrent_commands(
          self, session_factory, event_bus, make_product, stock_of
     ):
          locks = ProductLocks()
          ledger = StockLedger(session_factory, event_bus, locks=locks, retry_backoff=0)
          product_id = make_product(stock=20)

          def take_one(_):
               try:
                    ledger.remove_stock(product_id, 1, "Order fulfilment")
               except InsufficientStock:
                    pass

          with ThreadPoolExecutor(max_workers=8) as pool:
               list(pool.map(take_one, range(40)))

          assert stock_of(product_id) == 0
          assert len(locks) == 0


class TestRetries:
     def test_concurrency_conflict_is_retried(self, ledger, make_product, stock_of, monkeypatch):
          product_id = make_product(stock=5)
          original = ledger._commit
          calls = []

          def flaky(*args, **kwargs):
               calls.append(1)
               if len(calls) == 1:
                    raise ConcurrencyConflict("simulated conflict")
               return original(*args, **kwargs)

          monkeypatch.setattr(ledger, "_commit", flaky)

          result = ledger.add_stock(product_id, 5, "shipment")

          assert len(calls) == 2
          assert result.new_stock == 10
          assert stock_of(product_id) == 10

     def test_persistent_failure_surfaces_after_bounded_retries(
          self, session_factory, event_bus, make_product, stock_of, recorder, monkeypatch
     ):
          ledger = StockLedger(session_factory, event_bus, locks=ProductLocks(), max_retries=3, retry_backoff=0)
          product_id = make_product(stock=5)
          calls = []

          def broken(*args, **kwargs):
               calls.append(1)
               raise PersistenceFailure("database unavailable")

          monkeypatch.setattr(ledger, "_commit", broken)

          with pytest.raises(PersistenceFailure):
               ledger.remove_stock(product_id, 1, "damage")

          assert len(calls) == 3
          assert stock_of(product_id) == 5
          assert recorder.events == []

     def test_stale_version_from_other_writer_becomes_conflict_and_retries(
          self, ledger, engine, session_factory, make_product, stock_of
     ):
          product_id = make_product(stock=30)
          bumped = []

          # Another process updates the row between our read and our write
          def bump_version(session, flush_context, instances):
               if not bumped:
                    bumped.append(1)
                    with engine.begin() as conn:
                         conn.execute(
                              text("UPDATE products SET version = version + 1 WHERE id = :id"),
                              {"id": product_id},
                         )

          event.listen(session_factory, "before_flush", bump_version)
          try:
               result = ledger.add_stock(product_id, 4, "shipment")
          finally:
               event.remove(session_factory, "before_flush", bump_version)

          assert bumped == [1]
          assert result.new_stock == 34
          assert stock_of(product_id) == 34
          assert len(_transactions(session_factory, product_id)) == 1

     def test_database_error_rolls_back_both_writes(self, ledger, session_factory, make_product, stock_of):
          product_id = make_product(stock=12)

          def fail_flush(session, flush_context):
               raise OperationalError("INSERT", {}, Exception("disk I/O error"))

          event.listen(session_factory, "after_flush", fail_flush)
          try:
               with pytest.raises(PersistenceFailure):
                    ledger.add_stock(product_id, 3, "shipment")
          finally:
               event.remove(session_factory, "after_flush", fail_flush)

          assert stock_of(product_id) == 12
          assert _transactions(session_factory, product_id) == []


class TestAppendOnly:
     def test_transactions_cannot_be_updated(self, ledger, make_product, session_factory):
          product_id = make_product(stock=1)
          tx_id = ledger.add_stock(product_id, 1, "shipment").transaction.id

          with session_factory() as session:
               tx = session.get(InventoryTransaction, tx_id)
               tx.reason = "rewritten"
               with pytest.raises(LedgerImmutableError):
                    session.commit()

     def test_transactions_cannot_be_deleted(self, ledger, make_product, session_factory):
          product_id = make_product(stock=1)
          tx_id = ledger.add_stock(product_id, 1, "shipment").transaction.id

          with session_factory() as session:
               session.delete(session.get(InventoryTransaction, tx_id))
               with pytest.raises(LedgerImmutableError):
                    session.commit()

          assert len(_transactions(session_factory, product_id)) == 1
