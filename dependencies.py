# dependencies.py
"""
Shared FastAPI dependencies: token auth and the process-wide ledger.

Routers depend on these instead of importing from main.py.
"""
from functools import lru_cache

from fastapi import HTTPException, Request
from jose import JWTError, jwt

import config
from database import SessionLocal
from events import EventBus
from events.stock_alerts import StockAlertPlugin
from services.stock_ledger import StockLedger


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=401, detail="Missing token")
     token = auth.split(" ")[1]
     try:
          payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
          return payload
     except JWTError:
          raise HTTPException(status_code=403, detail="Invalid token")


def performed_by(token: dict):
     """Acting principal recorded on ledger transactions."""
     user_id = token.get("id")
     return str(user_id) if user_id is not None else None


@lru_cache(maxsize=None)
def get_event_bus() -> EventBus:
     bus = EventBus(sync=config.EVENTS_SYNC, max_workers=config.EVENTS_MAX_WORKERS)
     bus.register(StockAlertPlugin(), name="stock-alerts")
     return bus


@lru_cache(maxsize=None)
def get_ledger() -> StockLedger:
     return StockLedger(SessionLocal, get_event_bus())
