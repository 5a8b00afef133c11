"""
Pydantic schemas for stock alert API responses.
"""
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from services.stock_alerts import StockLevel


class AlertProduct(BaseModel):
     id: int
     name: str
     stock: int

     model_config = ConfigDict(from_attributes=True)


class StockAlertResponse(BaseModel):
     """One product at or below its alert threshold."""
     product: AlertProduct
     current_stock: int
     threshold: int
     level: StockLevel
     needs_reorder: bool

     model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ReorderReportResponse(BaseModel):
     products: List[StockAlertResponse]
     total_products: int
     urgent_count: int
     low_stock_count: int

     model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ReorderRequest(BaseModel):
     """Body for PUT /stock-alerts/reorder/{product_id}."""
     quantity: Any = Field(None, description="Units to reorder (whole number > 0)")
