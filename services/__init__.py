from .stock_ledger import StockLedger, StockAdjustment, ProductLocks, COMMON_REASONS
from .stock_alerts import StockAlertService, StockLevel
from .ledger_queries import (
     TransactionFilters,
     list_by_product,
     list_transactions,
     aggregate_totals,
     get_transaction,
     verify_product_chain,
)

__all__ = [
     "StockLedger",
     "StockAdjustment",
     "ProductLocks",
     "COMMON_REASONS",
     "StockAlertService",
     "StockLevel",
     "TransactionFilters",
     "list_by_product",
     "list_transactions",
     "aggregate_totals",
     "get_transaction",
     "verify_product_chain",
]
