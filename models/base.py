from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
     """Naive UTC timestamp, matching the DateTime columns (no tz)."""
     return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
     """Base class for the inventory models; each model names its own table."""
