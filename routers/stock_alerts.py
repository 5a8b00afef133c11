# routers/stock_alerts.py
"""
Stock alert API routes.

Read-only views over product stock levels, plus a reorder shortcut that
records the restock through the inventory ledger.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_ledger, performed_by, verify_token
from schemas.inventory import AddStockResponse, AddedProductSummary, TransactionResponse
from schemas.stock_alert import ReorderReportResponse, ReorderRequest, StockAlertResponse
from services.stock_alerts import StockAlertService
from services.stock_ledger import StockLedger

router = APIRouter(prefix="/api/stock-alerts", tags=["stock-alerts"])

REORDER_REASON = "Reorder"


@router.get("/out-of-stock", response_model=List[StockAlertResponse], summary="Out of stock products")
def get_out_of_stock(
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     alerts = StockAlertService.get_out_of_stock(db)
     return [StockAlertResponse.model_validate(a) for a in alerts]


@router.get("/low-stock", response_model=List[StockAlertResponse], summary="Low stock products")
def get_low_stock(
     threshold: Optional[int] = Query(None, ge=0, description="Override the low stock threshold"),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     alerts = StockAlertService.get_low_stock(db, threshold)
     return [StockAlertResponse.model_validate(a) for a in alerts]


@router.get("/all", response_model=List[StockAlertResponse], summary="All stock alerts")
def get_all_alerts(
     threshold: Optional[int] = Query(None, ge=0, description="Override the low stock threshold"),
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     alerts = StockAlertService.get_all_alerts(db, threshold)
     return [StockAlertResponse.model_validate(a) for a in alerts]


@router.get("/reorder-report", response_model=ReorderReportResponse, summary="Reorder report")
def get_reorder_report(
     db: Session = Depends(get_session),
     token: dict = Depends(verify_token)
):
     return ReorderReportResponse.model_validate(StockAlertService.get_reorder_report(db))


@router.put("/reorder/{product_id}", response_model=AddStockResponse, summary="Reorder a product")
def reorder(
     product_id: int,
     body: ReorderRequest,
     ledger: StockLedger = Depends(get_ledger),
     token: dict = Depends(verify_token)
):
     """Restock a product; recorded as an "add" transaction with reason Reorder."""
     adjustment = ledger.add_stock(
          product_id,
          body.quantity,
          REORDER_REASON,
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
