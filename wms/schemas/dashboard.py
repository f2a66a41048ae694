"""
Pydantic schemas for dashboard endpoints.
"""
from typing import Optional
from decimal import Decimal
from pydantic import BaseModel


class DashboardSummary(BaseModel):
    """Headline stock and activity figures."""
    total_items: int
    total_quantity: float
    total_stock_value: Decimal
    low_stock_count: int
    out_of_stock_count: int
    inbound_count: int
    inbound_quantity: float
    outbound_count: int
    outbound_quantity: float
    activity_days: int
    open_opname_sessions: int
    open_purchase_orders: int


class LowStockItem(BaseModel):
    id: str
    material_no: str
    sloc: str
    name: str
    quantity: float
    min_stock: float
    max_stock: Optional[float] = None
    shortfall: float
    uom: str


class HealthCheck(BaseModel):
    status: str
    version: str
    database: str
