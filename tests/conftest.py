"""Shared pytest fixtures for the inventory ledger tests."""
import os

os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt

import config
from database import build_engine, build_session_factory, get_session, init_db
from dependencies import get_ledger
from events import EventBus, hookimpl
from models import Product
from services.stock_ledger import ProductLocks, StockLedger


class RecordingSubscriber:
     """Collects every stock_changed event it receives."""

     def __init__(self):
          self.events = []

     @hookimpl
     def stock_changed(
          self,
          product_id,
          product_name,
          transaction_id,
          type,
          quantity,
          previous_stock,
          new_stock,
          created_at,
     ):
          self.events.append({
               "product_id": product_id,
               "product_name": product_name,
               "transaction_id": transaction_id,
               "type": type,
               "quantity": quantity,
               "previous_stock": previous_stock,
               "new_stock": new_stock,
               "created_at": created_at,
          })


@pytest.fixture
def engine(tmp_path):
     """SQLite file database with all tables created."""
     engine = build_engine(f"sqlite:///{tmp_path / 'inventory.db'}", echo=False)
     init_db(engine)
     try:
          yield engine
     finally:
          engine.dispose()


@pytest.fixture
def session_factory(engine):
     return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
     session = session_factory()
     try:
          yield session
     finally:
          session.close()


@pytest.fixture
def make_product(session_factory):
     """Create a product directly (products are owned outside the ledger)."""

     def _make(name="Sparkling Water 500ml", stock=0):
          with session_factory() as session:
               product = Product(name=name, stock=stock)
               session.add(product)
               session.commit()
               return product.id

     return _make


@pytest.fixture
def recorder():
     return RecordingSubscriber()


@pytest.fixture
def event_bus(recorder):
     bus = EventBus(sync=True)
     bus.register(recorder, name="recorder")
     try:
          yield bus
     finally:
          bus.shutdown()


@pytest.fixture
def ledger(session_factory, event_bus):
     return StockLedger(session_factory, event_bus, locks=ProductLocks(), retry_backoff=0)


@pytest.fixture
def stock_of(session_factory):
     """Read a product's current stock with a fresh session."""

     def _stock(product_id):
          with session_factory() as session:
               return session.get(Product, product_id).stock

     return _stock


@pytest.fixture
def client(session_factory, ledger):
     from main import app

     def _get_session():
          session = session_factory()
          try:
               yield session
               session.commit()
          except Exception:
               session.rollback()
               raise
          finally:
               session.close()

     app.dependency_overrides[get_session] = _get_session
     app.dependency_overrides[get_ledger] = lambda: ledger
     try:
          yield TestClient(app)
     finally:
          app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
     token = jwt.encode({"id": 7, "role": "admin"}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
     return {"Authorization": f"Bearer {token}"}
