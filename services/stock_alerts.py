# services/stock_alerts.py
"""
Stock Alert Service - read-only evaluation of product stock levels.

Compares products.stock against the configured low / critical thresholds.
Nothing here writes stock: a reorder goes through the stock ledger like any
other addition.
"""
import enum
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.orm import Session

import config
from models import Product


class StockLevel(str, enum.Enum):
     """Stock level classification."""
     OUT_OF_STOCK = "out_of_stock"
     CRITICAL = "critical"
     LOW = "low"
     OK = "ok"


@dataclass
class StockAlert:
     product: Product
     current_stock: int
     threshold: int
     level: StockLevel

     @property
     def needs_reorder(self) -> bool:
          return self.level != StockLevel.OK


@dataclass
class ReorderReport:
     products: list = field(default_factory=list)
     total_products: int = 0
     urgent_count: int = 0
     low_stock_count: int = 0


def evaluate(
     stock: int,
     low_threshold: Optional[int] = None,
     critical_threshold: Optional[int] = None
) -> StockLevel:
     """Classify a stock level against the thresholds."""
     low = config.LOW_STOCK_THRESHOLD if low_threshold is None else low_threshold
     critical = config.CRITICAL_STOCK_THRESHOLD if critical_threshold is None else critical_threshold

     if stock <= 0:
          return StockLevel.OUT_OF_STOCK
     if stock <= critical:
          return StockLevel.CRITICAL
     if stock <= low:
          return StockLevel.LOW
     return StockLevel.OK


def critical_threshold_for(low_threshold: int) -> int:
     """
     Critical threshold to pair with a low threshold override.

     Raising the low threshold keeps the configured critical one; lowering it
     below LOW_STOCK_THRESHOLD scales critical down by the same ratio, so a
     smaller override still separates critical from low products.
     """
     low = config.LOW_STOCK_THRESHOLD
     critical = config.CRITICAL_STOCK_THRESHOLD
     if low <= 0 or low_threshold >= low:
          return critical
     return min(critical, low_threshold * critical // low)


class StockAlertService:
     """Service class for stock alert queries."""

     @staticmethod
     def _to_alert(product: Product, threshold: int) -> StockAlert:
          return StockAlert(
               product=product,
               current_stock=product.stock,
               threshold=threshold,
               level=evaluate(
                    product.stock,
                    low_threshold=threshold,
                    critical_threshold=critical_threshold_for(threshold),
               ),
          )

     @staticmethod
     def get_out_of_stock(db: Session) -> list[StockAlert]:
          """Products with nothing on hand."""
          products = (
               db.query(Product)
               .filter(Product.stock <= 0)
               .order_by(Product.name)
               .all()
          )
          return [StockAlertService._to_alert(p, 0) for p in products]

     @staticmethod
     def get_low_stock(db: Session, threshold: Optional[int] = None) -> list[StockAlert]:
          """
          Products that still have stock but are at or below the threshold.

          Args:
               db: SQLAlchemy database session
               threshold: Override for LOW_STOCK_THRESHOLD

          Returns:
               Alerts ordered by stock ascending
          """
          if threshold is None:
               threshold = config.LOW_STOCK_THRESHOLD

          products = (
               db.query(Product)
               .filter(Product.stock > 0, Product.stock <= threshold)
               .order_by(Product.stock, Product.name)
               .all()
          )
          return [StockAlertService._to_alert(p, threshold) for p in products]

     @staticmethod
     def get_all_alerts(db: Session, threshold: Optional[int] = None) -> list[StockAlert]:
          """Out-of-stock and low-stock products together, lowest stock first."""
          if threshold is None:
               threshold = config.LOW_STOCK_THRESHOLD

          products = (
               db.query(Product)
               .filter(Product.stock <= threshold)
               .order_by(Product.stock, Product.name)
               .all()
          )
          return [StockAlertService._to_alert(p, threshold) for p in products]

     @staticmethod
     def get_reorder_report(db: Session) -> ReorderReport:
          """
          Summarise what needs reordering.

          urgent_count covers products at or below the critical threshold
          (out of stock included); low_stock_count covers the rest of the
          products at or below the low threshold.
          """
          alerts = StockAlertService.get_all_alerts(db)
          urgent = [a for a in alerts if a.level in (StockLevel.OUT_OF_STOCK, StockLevel.CRITICAL)]

          return ReorderReport(
               products=alerts,
               total_products=len(alerts),
               urgent_count=len(urgent),
               low_stock_count=len(alerts) - len(urgent),
          )
