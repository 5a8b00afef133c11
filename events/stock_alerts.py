"""Built-in subscriber that re-evaluates stock alerts after each change."""
import logging
import threading

from events.hookspecs import hookimpl
from services.stock_alerts import StockLevel, evaluate

logger = logging.getLogger(__name__)


class StockAlertPlugin:
     """Log a warning whenever a product's stock moves into low, critical or out of stock.

     Keeps the last level seen per product so repeated removals at the
     same level do not repeat the warning.
     """

     def __init__(self) -> None:
          self.levels: dict[int, StockLevel] = {}
          self._lock = threading.Lock()

     @hookimpl
     def stock_changed(self, product_id: int, product_name: str, new_stock: int) -> None:
          level = evaluate(new_stock)
          with self._lock:
               previous = self.levels.get(product_id, StockLevel.OK)
               self.levels[product_id] = level

          if level == previous or level == StockLevel.OK:
               return
          if level == StockLevel.OUT_OF_STOCK:
               logger.warning("Product %s (%s) is out of stock", product_id, product_name)
          else:
               logger.warning(
                    "Product %s (%s) stock is %s: %d on hand",
                    product_id, product_name, level.value, new_stock,
               )
