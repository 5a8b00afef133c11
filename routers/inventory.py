# routers/inventory.py
"""
Inventory ledger API routes.

POST /add and /remove are the only way stock changes; both go through the
StockLedger, which commits the transaction record and the new stock level
together. The GET routes read the ledger and never write.
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_ledger, performed_by, verify_token
from models import TransactionType
from schemas.inventory import (
     AddStockResponse,
     AddedProductSummary,
     ChainVerificationResponse,
     ErrorResponse,
     RemoveStockResponse,
     RemovedProductSummary,
     StockAdjustmentRequest,
     TotalsResponse,
     TransactionListResponse,
     TransactionResponse,
)
from services import ledger_queries
from services.stock_ledger import COMMON_REASONS, StockLedger

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

COMMAND_ERRORS = {
     400: {"model": ErrorResponse, "description": "InvalidQuantity or InvalidReason"},
     404: {"model": ErrorResponse, "description": "ProductNotFound"},
     409: {"model": ErrorResponse, "description": "InsufficientStock or ConcurrencyConflict"},
     503: {"model": ErrorResponse, "description": "PersistenceFailure"},
}


@router.post(
     "/add",
     response_model=AddStockResponse,
     responses=COMMAND_ERRORS,
     summary="Add stock to a product"
)
def add_stock(
     body: StockAdjustmentRequest,
     ledger: StockLedger = Depends(get_ledger),
     token: dict = Depends(verify_token)
):
     """
     Record a stock addition and raise the product's stock by **quantity**.

     - **productId**: product to restock
     - **quantity**: units added (must be > 0)
     - **reason**: why the stock changed (required)
     - **notes**: optional free text
     """
     adjustment = ledger.add_stock(
          body.product_id,
          body.quantity,
          body.reason,
          notes=body.notes,
          performed_by=performed_by(token),
     )
     return AddStockResponse(
          transaction=TransactionResponse.model_validate(adjustment.transaction),
          product=AddedProductSummary(
               id=adjustment.product_id,
               name=adjustment.product_name,
               previous_stock=adjustment.previous_stock,
               added_quantity=adjustment.quantity,
               new_stock=adjustment.new_stock,
          ),
     )


@router.post(
     "/remove",
     response_model=RemoveStockResponse,
     responses=COMMAND_ERRORS,
     summary="Remove stock from a product"
)
def remove_stock(
     body: StockAdjustmentRequest,
     ledger: StockLedger = Depends(get_ledger),
     token: dict = Depends(verify_token)
):
     """
     Record a stock removal. Rejected with InsufficientStock when
     **quantity** exceeds the stock on hand.
     """
     adjustment = ledger.remove_stock(
          body.product_id,
          body.quantity,
          body.reason,
          notes=body.notes,
          performed_by=performed_by(token),
     )
     return RemoveStockResponse(
          transaction=TransactionResponse.model_validate(adjustment.transaction),
          product=RemovedProductSummary(
               id=adjustment.product_id,
               name=adjustment.product_name,
               previous_stock=adjustment.previous_stock,
               removed_quantity=adjustment.quantity,
               new_stock=adjustment.new_stock,
          ),
     )


@router.get(
     "",
     response_model=TransactionListResponse,
     summary="List inventory transactions with filters"
)
def list_transactions(
     product_id: Optional[int] = Query(None, alias="productId", description="Filter by product ID"),
     type: Optional[TransactionType] = Query(None, description="Filter by add/remove"),
     start_date: Optional[date] = Query(None, alias="startDate", description="First day included"),
     end_date: Optional[date] = Query(None, alias="endDate", description="Last day included"),
     page: int = Query(1, ge=1, description="Page number"),
     limit: int = Query(ledger_queries.DEFAULT_PAGE_SIZE, ge=1, le=ledger_queries.MAX_PAGE_SIZE, description="Items per page"),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     """Paginated ledger, most recent first."""
     filters = ledger_queries.TransactionFilters(
          product_id=product_id,
          type=type,
          start_date=start_date,
          end_date=end_date,
          page=page,
          limit=limit,
     )
     transactions, total = ledger_queries.list_transactions(db, filters)
     return TransactionListResponse(
          transactions=[TransactionResponse.model_validate(tx) for tx in transactions],
          total=total,
          page=page,
          limit=limit,
     )


@router.get(
     "/totals",
     response_model=TotalsResponse,
     summary="Total quantity added or removed"
)
def get_totals(
     type: TransactionType = Query(..., description="add or remove"),
     product_id: Optional[int] = Query(None, alias="productId"),
     start_date: Optional[date] = Query(None, alias="startDate"),
     end_date: Optional[date] = Query(None, alias="endDate"),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     total = ledger_queries.aggregate_totals(
          db,
          type,
          start_date=start_date,
          end_date=end_date,
          product_id=product_id,
     )
     return TotalsResponse(
          type=type,
          total=total,
          product_id=product_id,
          start_date=start_date,
          end_date=end_date,
     )


@router.get(
     "/reasons",
     response_model=List[str],
     summary="Suggested adjustment reasons"
)
def get_reasons(token: dict = Depends(verify_token)):
     return COMMON_REASONS


@router.get(
     "/product/{product_id}",
     response_model=List[TransactionResponse],
     summary="Stock history for a product"
)
def get_product_history(
     product_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     transactions = ledger_queries.list_by_product(db, product_id)
     return [TransactionResponse.model_validate(tx) for tx in transactions]


@router.get(
     "/product/{product_id}/verify",
     response_model=ChainVerificationResponse,
     summary="Verify a product's stock chain"
)
def verify_product_chain(
     product_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     """
     Check that the product's transactions form an unbroken chain and that
     the product's stock equals the last recorded new stock.
     """
     valid, message, checked = ledger_queries.verify_product_chain(db, product_id)
     return ChainVerificationResponse(
          product_id=product_id,
          valid=valid,
          message=message,
          transactions_checked=checked,
     )


@router.get(
     "/{transaction_id}",
     response_model=TransactionResponse,
     summary="Get transaction by ID"
)
def get_transaction(
     transaction_id: int,
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     return TransactionResponse.model_validate(ledger_queries.get_transaction(db, transaction_id))
