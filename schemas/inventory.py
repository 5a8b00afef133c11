"""
Pydantic schemas for Inventory ledger API request/response validation.

JSON uses camelCase (productId, previousStock, ...); snake_case names are
accepted on input too.
"""
from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models import TransactionType


class StockAdjustmentRequest(BaseModel):
     """Body for POST /inventory/add and POST /inventory/remove.

     Type and range checks on quantity and reason are done by the ledger so
     that the caller gets InvalidQuantity / InvalidReason rather than a schema error.
     """
     product_id: int = Field(..., description="Product to adjust")
     quantity: Any = Field(None, description="Units to add or remove (whole number > 0)")
     reason: Optional[str] = Field(None, description="Why the stock changed")
     notes: Optional[str] = Field(None, description="Free-text notes")

     model_config = ConfigDict(
          alias_generator=to_camel,
          populate_by_name=True,
          json_schema_extra={
               "example": {
                    "productId": 1,
                    "quantity": 50,
                    "reason": "New shipment arrived",
                    "notes": "PO-2291",
               }
          }
     )


class TransactionResponse(BaseModel):
     """Schema for a single ledger transaction."""
     id: int
     product_id: int
     product_name: str
     type: TransactionType
     quantity: int
     previous_stock: int
     new_stock: int
     reason: str
     notes: Optional[str] = None
     performed_by: Optional[str] = None
     created_at: datetime

     model_config = ConfigDict(
          alias_generator=to_camel,
          populate_by_name=True,
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 42,
                    "productId": 1,
                    "productName": "Sparkling Water 500ml",
                    "type": "add",
                    "quantity": 50,
                    "previousStock": 100,
                    "newStock": 150,
                    "reason": "New shipment arrived",
                    "notes": None,
                    "performedBy": "7",
                    "createdAt": "2026-10-18T10:30:00",
               }
          }
     )


class AddedProductSummary(BaseModel):
     id: int
     name: str
     previous_stock: int
     added_quantity: int
     new_stock: int

     model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RemovedProductSummary(BaseModel):
     id: int
     name: str
     previous_stock: int
     removed_quantity: int
     new_stock: int

     model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddStockResponse(BaseModel):
     """Response for POST /inventory/add."""
     transaction: TransactionResponse
     product: AddedProductSummary

     model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RemoveStockResponse(BaseModel):
     """Response for POST /inventory/remove."""
     transaction: TransactionResponse
     product: RemovedProductSummary

     model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransactionListResponse(BaseModel):
     """Schema for paginated transaction list response."""
     transactions: List[TransactionResponse]
     total: int
     page: int = 1
     limit: int = 20

     model_config = ConfigDict(
          alias_generator=to_camel,
          populate_by_name=True,
          json_schema_extra={
               "example": {
                    "transactions": [],
                    "total": 0,
                    "page": 1,
                    "limit": 20,
               }
          }
     )


class TotalsResponse(BaseModel):
     """Sum of quantities for one transaction type."""
     type: TransactionType
     total: int
     product_id: Optional[int] = None
     start_date: Optional[date] = None
     end_date: Optional[date] = None

     model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChainVerificationResponse(BaseModel):
     product_id: int
     valid: bool
     message: str
     transactions_checked: int

     model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorDetail(BaseModel):
     kind: str
     message: str


class ErrorResponse(BaseModel):
     """Body returned for ledger errors."""
     error: ErrorDetail
