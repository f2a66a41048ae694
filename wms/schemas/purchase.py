"""
Pydantic schemas for purchase orders.
"""
from typing import Optional
import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


class PurchaseOrderStatus(str, Enum):
    ORDERED = "ORDERED"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"


class PurchaseOrderCreate(BaseModel):
    """Schema for ordering more of a stock item."""
    material_no: str = Field(..., min_length=1)
    sloc: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    supplier: Optional[str] = None
    order_date: Optional[datetime.date] = None
    total_cost: Optional[Decimal] = Field(None, ge=0, description="Defaults to quantity x item price")


class PurchaseOrderStatusUpdate(BaseModel):
    status: PurchaseOrderStatus


class PurchaseOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: str
    material_no: str
    sloc: str
    item_name: str
    quantity: float
    order_date: datetime.date
    status: PurchaseOrderStatus
    supplier: Optional[str] = None
    total_cost: Decimal
    created_at: datetime.datetime
