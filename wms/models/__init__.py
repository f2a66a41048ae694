"""
SQLAlchemy models for the warehouse application.
Import all models here to ensure they're registered with SQLAlchemy.
"""
from wms.models.user import User
from wms.models.stock_item import (
    StockItem, StockHistory, item_key, split_item_key, to_quantity, format_quantity, QUANTITY_SCALE,
)
from wms.models.transaction import MaterialIn, MaterialOut, MaterialTransaction
from wms.models.purchase import PurchaseOrder
from wms.models.opname import StockOpnameSession, StockOpnameItem

__all__ = [
    "User",
    "StockItem",
    "StockHistory",
    "item_key",
    "split_item_key",
    "to_quantity",
    "format_quantity",
    "QUANTITY_SCALE",
    "MaterialIn",
    "MaterialOut",
    "MaterialTransaction",
    "PurchaseOrder",
    "StockOpnameSession",
    "StockOpnameItem",
]
