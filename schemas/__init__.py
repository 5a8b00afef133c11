from .inventory import (
     StockAdjustmentRequest,
     TransactionResponse,
     AddStockResponse,
     RemoveStockResponse,
     TransactionListResponse,
     TotalsResponse,
     ChainVerificationResponse,
     ErrorResponse,
)
from .stock_alert import (
     StockAlertResponse,
     ReorderReportResponse,
     ReorderRequest,
)

__all__ = [
     "StockAdjustmentRequest",
     "TransactionResponse",
     "AddStockResponse",
     "RemoveStockResponse",
     "TransactionListResponse",
     "TotalsResponse",
     "ChainVerificationResponse",
     "ErrorResponse",
     "StockAlertResponse",
     "ReorderReportResponse",
     "ReorderRequest",
]
