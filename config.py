# config.py
"""
Application settings loaded from the environment.

Values are read once at import time (after load_dotenv), the same way
database.py reads its connection settings.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# Stock thresholds used by the alert evaluator
LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", "10"))
CRITICAL_STOCK_THRESHOLD = int(os.getenv("CRITICAL_STOCK_THRESHOLD", "5"))

# Ledger commit retries (PersistenceFailure / ConcurrencyConflict)
LEDGER_MAX_RETRIES = int(os.getenv("LEDGER_MAX_RETRIES", "3"))
LEDGER_RETRY_BACKOFF = float(os.getenv("LEDGER_RETRY_BACKOFF", "0.05"))

# Outbound stock_changed notifications
EVENTS_SYNC = os.getenv("EVENTS_SYNC", "false").lower() == "true"
EVENTS_MAX_WORKERS = int(os.getenv("EVENTS_MAX_WORKERS", "2"))

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_ALGORITHM = "HS256"

CORS_ORIGINS = [o for o in os.getenv("CORS_ORIGINS", "").split(",") if o]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", "10000"))
