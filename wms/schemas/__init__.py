"""
Pydantic schemas for request/response validation.
"""
from wms.schemas.user import (
    UserStatus, UserBase, UserCreate, UserUpdate, ProfileUpdate, UserChangePassword,
    UserResponse, ModuleAccess, Token, TokenRefresh, LoginRequest, LoginResponse
)
from wms.schemas.inventory import (
    ItemCategory, AuditEntry, StockItemBase, StockItemCreate, StockItemUpdate,
    StockItemResponse, ImageUploadResponse
)
from wms.schemas.transaction import (
    Direction, InboundLog, OutboundLog, TransactionLog, TransactionGroup,
    TransactionGroupPage, OutboundCreate, InboundCreate, TransactionResult,
    LedgerEntryResponse
)
from wms.schemas.purchase import (
    PurchaseOrderStatus, PurchaseOrderCreate, PurchaseOrderStatusUpdate, PurchaseOrderResponse
)
from wms.schemas.opname import (
    OpnameStatus, OpnameSessionCreate, OpnameSessionResponse, OpnameItemResponse,
    OpnameItemPage, OpnameCountUpdate, OpnameStats
)
from wms.schemas.dashboard import DashboardSummary, LowStockItem, HealthCheck

__all__ = [
    # User schemas
    "UserStatus", "UserBase", "UserCreate", "UserUpdate", "ProfileUpdate", "UserChangePassword",
    "UserResponse", "ModuleAccess", "Token", "TokenRefresh", "LoginRequest", "LoginResponse",

    # Inventory schemas
    "ItemCategory", "AuditEntry", "StockItemBase", "StockItemCreate", "StockItemUpdate",
    "StockItemResponse", "ImageUploadResponse",

    # Transaction schemas
    "Direction", "InboundLog", "OutboundLog", "TransactionLog", "TransactionGroup",
    "TransactionGroupPage", "OutboundCreate", "InboundCreate", "TransactionResult",
    "LedgerEntryResponse",

    # Purchase schemas
    "PurchaseOrderStatus", "PurchaseOrderCreate", "PurchaseOrderStatusUpdate", "PurchaseOrderResponse",

    # Opname schemas
    "OpnameStatus", "OpnameSessionCreate", "OpnameSessionResponse", "OpnameItemResponse",
    "OpnameItemPage", "OpnameCountUpdate", "OpnameStats",

    # Dashboard schemas
    "DashboardSummary", "LowStockItem", "HealthCheck",
]
